"""Shared HTTP helpers."""

from .errors import (
    ApiError,
    api_error_handler,
    bad_request_error,
    request_validation_error_handler,
)

__all__ = [
    "ApiError",
    "api_error_handler",
    "bad_request_error",
    "request_validation_error_handler",
]
