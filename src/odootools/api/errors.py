from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from odootools.common.errors import (
    AuthenticationError,
    InvalidInputError,
    NotFoundError,
    OdooToolsError,
    QueryTimeoutError,
)
from odootools.common.logger import get_logger

logger = get_logger("api.errors")

STATUS_BY_ERROR = [
    (InvalidInputError, 400),
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (QueryTimeoutError, 504),
]


def status_for(exc: OdooToolsError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


async def toolkit_error_handler(request: Request, exc: OdooToolsError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.url.path} failed: {exc.error_code.value}: {exc.message}")
    return JSONResponse(status_code=status, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Missing required fields", "details": details})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OdooToolsError, toolkit_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
