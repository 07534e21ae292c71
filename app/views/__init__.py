"""Pydantic schemas used as views in the MVC architecture."""

from .analysis import (
    AUDIO_TIMEOUT_ERROR,
    build_error_response,
    error_tag_for,
    status_code_for,
)
from .common import ErrorResponse, StatusResponse
from .health import HealthResponse

__all__ = [
    "AUDIO_TIMEOUT_ERROR",
    "ErrorResponse",
    "HealthResponse",
    "StatusResponse",
    "build_error_response",
    "error_tag_for",
    "status_code_for",
]
