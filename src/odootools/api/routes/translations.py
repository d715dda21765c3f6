from fastapi import APIRouter

from odootools.api.models import ErrorResponse, ValidatePoRequest
from odootools.inspection import validate_po
from odootools.inspection.models import PoValidationReport

router = APIRouter()


@router.post("/validate-po", response_model=PoValidationReport, responses={400: {"model": ErrorResponse}})
async def validate_po_route(payload: ValidatePoRequest):
    return validate_po(payload.content)
