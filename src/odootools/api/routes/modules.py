from typing import List

from fastapi import APIRouter, Request

from odootools.api.dependencies import open_session
from odootools.api.models import CompareModulesRequest, ConnectionRequest, CountRecordsRequest
from odootools.inspection import compare_modules, count_records, list_modules
from odootools.inspection.models import ModuleComparison, ModuleInfo, RecordCount

router = APIRouter()


@router.post("/list-modules")
async def list_modules_route(payload: ConnectionRequest, request: Request) -> dict:
    async with open_session(request, payload) as session:
        modules: List[ModuleInfo] = await list_modules(session)
    return {"modules": [m.model_dump() for m in modules]}


@router.post("/compare-modules", response_model=ModuleComparison)
async def compare_modules_route(payload: CompareModulesRequest, request: Request):
    async with open_session(request, payload.env1) as env1, open_session(request, payload.env2) as env2:
        return await compare_modules(env1, env2)


@router.post("/count-records", response_model=RecordCount)
async def count_records_route(payload: CountRecordsRequest, request: Request):
    async with open_session(request, payload) as session:
        return await count_records(session, payload.model, payload.domain)
