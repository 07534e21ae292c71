"""Telemetry helpers and metrics."""

from .metrics import (
    ANALYSIS_OUTCOMES,
    AUDIO_IN_FLIGHT,
    BACKEND_PROBES,
    ERROR_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_request,
    record_analysis_outcome,
    record_probe,
)

__all__ = [
    "ANALYSIS_OUTCOMES",
    "AUDIO_IN_FLIGHT",
    "BACKEND_PROBES",
    "ERROR_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_request",
    "record_analysis_outcome",
    "record_probe",
]
