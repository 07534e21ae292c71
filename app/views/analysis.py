"""Response mapping for analysis outcomes."""

from __future__ import annotations

from fastapi import status

from app.domain import ErrorKind, MediaKind

from .common import ErrorResponse

AUDIO_TIMEOUT_ERROR = "Audio processing timeout"

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PROCESSING_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    # Non-standard "client closed request"; the caller never reads it.
    ErrorKind.CLIENT_DISCONNECTED: 499,
}


def status_code_for(error_kind: ErrorKind) -> int:
    return _STATUS_BY_KIND.get(error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_tag_for(kind: MediaKind, error_kind: ErrorKind) -> str:
    """Short ``error`` tag shown to callers for a failed request."""

    if error_kind is ErrorKind.PROCESSING_TIMEOUT:
        return AUDIO_TIMEOUT_ERROR
    return f"Failed to process {kind.value}"


def build_error_response(kind: MediaKind, error_kind: ErrorKind, message: str) -> ErrorResponse:
    if error_kind is ErrorKind.VALIDATION:
        return ErrorResponse(error=message, message=message)
    return ErrorResponse(error=error_tag_for(kind, error_kind), message=message)


__all__ = [
    "AUDIO_TIMEOUT_ERROR",
    "build_error_response",
    "error_tag_for",
    "status_code_for",
]
