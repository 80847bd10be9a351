from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.core.config import ConfigError, require_square_credentials, settings

router = APIRouter()

@router.get("/healthz")
def healthz():
    return {"status": "ok"}

@router.get("/readyz")
def readyz(request: Request):
    try:
        require_square_credentials(settings)
    except ConfigError as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "error": exc.message, "missing": exc.missing},
        )
    if getattr(request.app.state, "square_client", None) is None:
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "error": "Square client is not initialized"},
        )
    return {"status": "ready", "square_environment": settings.SQUARE_ENVIRONMENT}
