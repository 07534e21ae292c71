"""Domain types and failure taxonomy for media analysis requests."""

from .errors import (
    AnalysisError,
    ArtifactIOError,
    BackendContractError,
    BackendUnavailableError,
    ClientDisconnectedError,
    ErrorKind,
    MalformedResultError,
    ProcessingTimeoutError,
    ResultTimeoutError,
    UploadValidationError,
)
from .models import AnalysisRequest, Failed, MediaKind, Outcome, Pending, Succeeded

__all__ = [
    "AnalysisError",
    "AnalysisRequest",
    "ArtifactIOError",
    "BackendContractError",
    "BackendUnavailableError",
    "ClientDisconnectedError",
    "ErrorKind",
    "Failed",
    "MalformedResultError",
    "MediaKind",
    "Outcome",
    "Pending",
    "ProcessingTimeoutError",
    "ResultTimeoutError",
    "Succeeded",
    "UploadValidationError",
]
