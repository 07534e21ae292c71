"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.01,
        0.05,
        0.1,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
        120.0,
        300.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

ANALYSIS_OUTCOMES = Counter(
    "analysis_requests_total",
    "Analysis requests by media kind and terminal outcome",
    ("kind", "outcome"),
)

AUDIO_IN_FLIGHT = Gauge(
    "audio_requests_in_flight",
    "Audio analysis requests currently awaiting the backend",
)

BACKEND_PROBES = Counter(
    "backend_availability_probes_total",
    "Backend availability checks by media kind and reported status",
    ("kind", "status"),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def record_analysis_outcome(kind: str, outcome: str) -> None:
    """Count a request that reached a terminal outcome."""

    ANALYSIS_OUTCOMES.labels(kind=kind, outcome=outcome).inc()


def record_probe(kind: str, status: str) -> None:
    """Count an availability report handed to a caller."""

    BACKEND_PROBES.labels(kind=kind, status=status).inc()
