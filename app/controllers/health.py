"""Backend availability and gateway status endpoints."""

import logging

from fastapi import APIRouter

from app.controllers.dependencies import AudioBackendDep, ImageBackendDep
from app.services import AvailabilityReport, AvailabilityStatus, BackendClient
from app.telemetry import record_probe
from app.views import HealthResponse, StatusResponse

router = APIRouter(prefix="/api", tags=["health"])

logger = logging.getLogger(__name__)


@router.get(
    "/health/image",
    response_model=HealthResponse,
    response_model_exclude_none=True,
)
async def image_health(backend: ImageBackendDep) -> HealthResponse:
    """Report whether the image backend looks usable right now."""
    return await _report(backend)


@router.get(
    "/health/audio",
    response_model=HealthResponse,
    response_model_exclude_none=True,
)
async def audio_health(backend: AudioBackendDep) -> HealthResponse:
    """Report the audio backend state, short-circuiting to busy while requests are in flight."""
    return await _report(backend)


@router.get("/status", response_model=StatusResponse)
async def gateway_status() -> StatusResponse:
    return StatusResponse(message="Network API is running")


async def _report(backend: BackendClient) -> HealthResponse:
    try:
        report = await backend.probe()
    except Exception as exc:  # pragma: no cover - defensive
        logger.exception("Availability check for %s failed", backend.label)
        report = AvailabilityReport(
            status=AvailabilityStatus.ERROR,
            message=f"Availability check failed: {exc}",
        )

    record_probe(backend.kind.value, report.status.value)
    return HealthResponse(**report.to_payload())
