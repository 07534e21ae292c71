"""Backend availability heuristics and the audio in-flight counter.

The reported status is advisory: it feeds the operator UI and is never used
to reject or delay an analysis request.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

import httpx

from app.telemetry import AUDIO_IN_FLIGHT

logger = logging.getLogger(__name__)


class AvailabilityStatus(str, Enum):
    READY = "ready"
    LOADING = "loading"
    BUSY = "busy"
    ERROR = "error"


@dataclass(frozen=True)
class AvailabilityReport:
    """Snapshot of what a backend looks like from the gateway right now."""

    status: AvailabilityStatus
    message: str
    details: Optional[dict[str, Any]] = None
    processing: Optional[bool] = None
    count: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status.value, "message": self.message}
        if self.processing is not None:
            payload["processing"] = self.processing
        if self.count is not None:
            payload["count"] = self.count
        if self.details:
            payload["details"] = self.details
        return payload


class BusyTracker:
    """Process-wide count of requests handed to a backend and not yet finished."""

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._count

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            AUDIO_IN_FLIGHT.inc()
            return self._count

    def decrement(self) -> int:
        with self._lock:
            if self._count == 0:
                logger.error("In-flight counter decremented below zero; ignoring")
                return 0
            self._count -= 1
            AUDIO_IN_FLIGHT.dec()
            return self._count

    @contextmanager
    def track(self) -> Iterator[int]:
        """Count the enclosed block as one in-flight request, released exactly once."""

        current = self.increment()
        try:
            yield current
        finally:
            self.decrement()


async def probe_backend(
    url: str,
    *,
    timeout: float,
    tracker: Optional[BusyTracker] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AvailabilityReport:
    """Classify a backend as ready, loading, busy or erroring.

    With a tracker, any in-flight request short-circuits to ``busy`` without
    touching the backend. Otherwise a short health GET decides: success is
    ``ready``, a timeout is ``busy`` (health port blocked mid-request), any
    other transport error is ``loading`` and a non-2xx answer is ``error``.
    """

    if tracker is not None:
        count = tracker.in_flight
        if count > 0:
            return AvailabilityReport(
                status=AvailabilityStatus.BUSY,
                message=f"Processing {count} request(s)",
                processing=True,
                count=count,
            )

    async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
        try:
            response = await client.get(url)
        except httpx.TimeoutException:
            return AvailabilityReport(
                status=AvailabilityStatus.BUSY,
                message="Backend did not answer the health check in time, likely processing",
                processing=True if tracker is not None else None,
            )
        except httpx.RequestError as exc:
            logger.debug("Health probe to %s failed: %s", url, exc)
            return AvailabilityReport(
                status=AvailabilityStatus.LOADING,
                message="Backend is not reachable yet",
                details={"reason": str(exc) or type(exc).__name__},
            )

    if response.is_success:
        details = _json_details(response)
        return AvailabilityReport(
            status=AvailabilityStatus.READY,
            message="Backend is ready",
            details=details,
            processing=False if tracker is not None else None,
            count=0 if tracker is not None else None,
        )

    return AvailabilityReport(
        status=AvailabilityStatus.ERROR,
        message=f"Backend health check returned HTTP {response.status_code}",
        details={"status_code": response.status_code},
    )


def _json_details(response: httpx.Response) -> Optional[dict[str, Any]]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def get_audio_tracker() -> BusyTracker:
    """Return the process-wide audio in-flight tracker."""
    return _AUDIO_TRACKER


_AUDIO_TRACKER = BusyTracker()


__all__ = [
    "AvailabilityReport",
    "AvailabilityStatus",
    "BusyTracker",
    "get_audio_tracker",
    "probe_backend",
]
