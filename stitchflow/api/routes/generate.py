"""POST /api/generate — prompt in, HTML preview + log trail out."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from stitchflow.api.schemas import GenerateRequest, GenerateResponse
from stitchflow.exceptions import CredentialMissing, InvalidRequest
from stitchflow.types import FlowResult

logger = logging.getLogger(__name__)
router = APIRouter(tags=["generate"])


def _result_to_response(result: FlowResult) -> GenerateResponse:
    return GenerateResponse(
        success=result.success,
        logs=result.log.lines(),
        code=result.code,
        version=result.version,
        error=result.error,
        interaction_id=result.continuation_token,
        project_id=result.project_id,
        screen_id=result.screen_id,
    )


def _rejection(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "logs": [], "error": message},
    )


@router.post("/generate", response_model=GenerateResponse, response_model_exclude_none=True)
async def generate(request: Request, body: GenerateRequest):
    """Run one design flow. Flow failures come back as 200 with success=false."""
    handler = request.app.state.handler
    try:
        result = await handler.handle(
            body.prompt,
            overrides=body.config,
            continuation_token=body.interaction_id,
        )
    except CredentialMissing as exc:
        logger.warning("[generate] Rejected: %s", exc)
        return _rejection(401, str(exc))
    except InvalidRequest as exc:
        logger.warning("[generate] Rejected: %s", exc)
        return _rejection(400, str(exc))

    if not result.success:
        logger.warning("[generate] Flow failed: %s", result.error)
    return _result_to_response(result)
