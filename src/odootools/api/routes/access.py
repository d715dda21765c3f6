from fastapi import APIRouter, Request

from odootools.api.dependencies import open_session
from odootools.api.models import CompareAccessRequest, ErrorResponse, UserRequest
from odootools.inspection import check_access_rights, compare_access_rights, group_insight
from odootools.inspection.models import AccessComparison, AccessReport, GroupInsightReport

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.post("/check-access-rights", response_model=AccessReport, responses=NOT_FOUND)
async def check_access_rights_route(payload: UserRequest, request: Request):
    async with open_session(request, payload) as session:
        return await check_access_rights(session, payload.target_user)


@router.post("/compare-access-rights", response_model=AccessComparison, responses=NOT_FOUND)
async def compare_access_rights_route(payload: CompareAccessRequest, request: Request):
    async with open_session(request, payload.env1) as env1, open_session(request, payload.env2) as env2:
        return await compare_access_rights(env1, payload.user1, env2, payload.user2)


@router.post("/group-insight", response_model=GroupInsightReport, responses=NOT_FOUND)
async def group_insight_route(payload: UserRequest, request: Request):
    async with open_session(request, payload) as session:
        return await group_insight(session, payload.target_user)
