"""
Health check endpoint.
Reports whether the credential issuer is ready to sign uploads.
"""
from fastapi import APIRouter, HTTPException, Request

router = APIRouter()


@router.get("")
async def health_check(request: Request):
    """
    Health check endpoint.
    Returns the status of the storage client.
    """
    issuer = getattr(request.app.state, "issuer", None)
    health_status = {
        "status": "healthy",
        "storage": "configured" if issuer is not None else "not configured",
    }

    if issuer is None:
        health_status["status"] = "unhealthy"
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
