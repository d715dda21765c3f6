from fastapi import APIRouter

import odootools

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "version": odootools.__version__}
