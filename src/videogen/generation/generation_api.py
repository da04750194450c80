"""HTTP routes for video generation."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..api.errors import ApiError, bad_request_error
from .generation_errors import RequestValidationError
from .generation_models import TerminalKind, TerminalResult
from .generation_schemas import ErrorResponse, GenerateVideoRequest, GenerateVideoResponse
from .generation_service import GenerationService

router = APIRouter(prefix="/api", tags=["generation"])
logger = logging.getLogger(__name__)


def get_generation_service(request: Request) -> GenerationService:
    """Fetch generation service from application state."""
    try:
        return request.app.state.generation_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("GenerationService is not configured") from exc


@router.post(
    "/generate-video",
    response_model=GenerateVideoResponse,
    responses={
        400: {"model": ErrorResponse},
        408: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_video(
    payload: GenerateVideoRequest,
    service: GenerationService = Depends(get_generation_service),
) -> JSONResponse:
    """Submit the job, wait for its terminal state and relay it."""
    try:
        job_request = service.build_request(
            payload.prompt, payload.provider, payload.api_key
        )
    except RequestValidationError as exc:
        logger.warning(
            "generation.request.rejected",
            extra={"provider": payload.provider, "reason": str(exc)},
        )
        raise bad_request_error(str(exc)) from exc

    result = await service.generate(job_request)
    return result_to_response(result)


def result_to_response(result: TerminalResult) -> JSONResponse:
    """Map a terminal result onto the caller-visible HTTP response."""
    if result.kind is TerminalKind.VIDEO_READY:
        assert result.video_url is not None
        body = GenerateVideoResponse(video_url=result.video_url)
        return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))
    raise ApiError(result.http_status, result.message or "Video generation failed")
