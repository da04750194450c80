"""Reusable error primitives for API exception handling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    message: str
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message},
            headers=dict(self.headers or {}),
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


def bad_request_error(message: str) -> ApiError:
    """Return an :class:`ApiError` for input rejected before any provider call."""

    return ApiError(status.HTTP_400_BAD_REQUEST, message)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed or mistyped bodies with 400 and the usual error shape."""

    logger.warning(
        "api.request.invalid_body",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    return await api_error_handler(request, bad_request_error(INVALID_BODY_MESSAGE))


__all__ = [
    "ApiError",
    "INVALID_BODY_MESSAGE",
    "api_error_handler",
    "bad_request_error",
    "request_validation_error_handler",
]
