"""GET /api/health — liveness plus which defaults are configured."""

from fastapi import APIRouter, Request

from stitchflow.api.schemas import HealthResponse
from stitchflow.version import __version__

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    cfg = request.app.state.config
    services = {
        "api": True,
        "credential": bool(cfg.access_token),
        "project": bool(cfg.project_id),
    }
    return HealthResponse(status="ok", version=__version__, services=services)
