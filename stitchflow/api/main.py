"""FastAPI application factory with lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from stitchflow.config import StitchflowConfig, config as default_config
from stitchflow.logging_config import configure_logging, mask_secret
from stitchflow.version import __version__

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        logger.info("[request] %s %s", request.method, request.url.path)
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    cfg: StitchflowConfig = app.state.config
    logger.info(
        "stitchflow v%s starting (mcp=%s, transport=%s, token=%s, project=%s)",
        __version__, cfg.mcp_url, cfg.transport,
        mask_secret(cfg.access_token), cfg.project_id or "(create per request)",
    )

    http_client: Optional[httpx.AsyncClient] = None
    if getattr(app.state, "handler", None) is None:
        from stitchflow.api.handler import GenerationHandler
        from stitchflow.mcp.client import build_invoker

        http_client = httpx.AsyncClient(timeout=cfg.request_timeout)
        app.state.handler = GenerationHandler(cfg, build_invoker(cfg, http_client=http_client))

    yield

    logger.info("stitchflow shutting down...")
    if http_client is not None:
        await http_client.aclose()


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "Invalid request: " + ("; ".join(problems) or "malformed body")
    logger.warning("[server] Rejected %s: %s", request.url.path, message)
    return JSONResponse(status_code=400, content={"success": False, "logs": [], "error": message})


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("[server] Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal Server Error"})


def create_app(cfg: Optional[StitchflowConfig] = None, handler=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        cfg:      Configuration; defaults to the environment-loaded instance.
        handler:  Prebuilt GenerationHandler. When omitted one is built at
                  startup around a shared httpx client.
    """
    cfg = cfg or default_config
    configure_logging(cfg.log_level)

    app = FastAPI(
        title="stitchflow",
        description="Prompt-to-HTML preview backend for the Stitch design MCP service.",
        version=__version__,
        lifespan=lifespan,
        debug=cfg.debug,
    )
    app.state.config = cfg
    app.state.handler = handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

    from stitchflow.api.routes import generate, health
    app.include_router(generate.router, prefix="/api")
    app.include_router(health.router, prefix="/api")

    return app


app = create_app()
