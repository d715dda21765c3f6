from fastapi import APIRouter, Request

from odootools.api.dependencies import open_session
from odootools.api.models import ErrorResponse, ExecuteQueryRequest
from odootools.execution.contracts import QueryResult
from odootools.execution.orchestrator import JobOrchestrator

router = APIRouter()


@router.post(
    "/execute-query",
    response_model=QueryResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def execute_query(payload: ExecuteQueryRequest, request: Request):
    async with open_session(request, payload) as session:
        orchestrator = JobOrchestrator(session)
        return await orchestrator.run_query(
            payload.query,
            timeout_ms=payload.timeout_ms,
            commit=payload.apply_changes,
        )
