"""Failure taxonomy for the analysis pipeline.

Every exception raised inside a request's pipeline derives from
:class:`AnalysisError` so the orchestrator can turn it into a terminal
``Failed`` outcome without knowing which stage produced it.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Category of a failed analysis request."""

    VALIDATION = "validation"
    ARTIFACT_IO = "artifact_io"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    BACKEND_CONTRACT = "backend_contract"
    RESULT_TIMEOUT = "result_timeout"
    PROCESSING_TIMEOUT = "processing_timeout"
    MALFORMED_RESULT = "malformed_result"
    CLIENT_DISCONNECTED = "client_disconnected"
    UNEXPECTED = "unexpected"


class AnalysisError(RuntimeError):
    """Base class for request-scoped pipeline failures."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class UploadValidationError(AnalysisError):
    """Raised when the inbound upload is missing or unusable."""

    kind = ErrorKind.VALIDATION


class ArtifactIOError(AnalysisError):
    """Raised when a scratch file cannot be written."""

    kind = ErrorKind.ARTIFACT_IO


class BackendUnavailableError(AnalysisError):
    """Raised when a backend cannot be reached or answers with an HTTP error."""

    kind = ErrorKind.BACKEND_UNAVAILABLE


class BackendContractError(AnalysisError):
    """Raised when a backend answers with an unexpected payload."""

    kind = ErrorKind.BACKEND_CONTRACT


class ResultTimeoutError(AnalysisError):
    """Raised when a result file does not appear within the polling bound."""

    kind = ErrorKind.RESULT_TIMEOUT

    def __init__(self, path: Path, elapsed: float) -> None:
        super().__init__(f"Timeout waiting for file: {path} ({elapsed:.1f}s)")
        self.path = path
        self.elapsed = elapsed


class ProcessingTimeoutError(AnalysisError):
    """Raised when the audio backend times out or drops the connection."""

    kind = ErrorKind.PROCESSING_TIMEOUT


class MalformedResultError(AnalysisError):
    """Raised when a result file exists but is not valid JSON."""

    kind = ErrorKind.MALFORMED_RESULT


class ClientDisconnectedError(AnalysisError):
    """Raised when the caller went away while the gateway was still waiting."""

    kind = ErrorKind.CLIENT_DISCONNECTED


__all__ = [
    "AnalysisError",
    "ArtifactIOError",
    "BackendContractError",
    "BackendUnavailableError",
    "ClientDisconnectedError",
    "ErrorKind",
    "MalformedResultError",
    "ProcessingTimeoutError",
    "ResultTimeoutError",
    "UploadValidationError",
]
