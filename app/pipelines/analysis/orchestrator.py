"""Per-request orchestration: materialize, submit, collect, clean up."""

from __future__ import annotations

import logging
import time
from typing import Mapping, Optional

from app.domain import (
    AnalysisError,
    AnalysisRequest,
    ErrorKind,
    Failed,
    MediaKind,
    Succeeded,
)
from app.services import (
    ArtifactStore,
    BackendClient,
    get_artifact_store,
    get_audio_backend,
    get_image_backend,
)
from app.services.polling import AbortCheck
from app.telemetry import record_analysis_outcome

from .ingestion import resolve_extension

logger = logging.getLogger("app.services.analysis_pipeline")


class AnalysisOrchestrator:
    """Drive one upload through its backend and always remove its artifacts.

    ``run`` never raises for pipeline failures: every error becomes a
    ``Failed`` outcome on the returned request, after cleanup has run and the
    backend's in-flight scope has closed.
    """

    def __init__(
        self,
        store: ArtifactStore,
        backends: Mapping[MediaKind, BackendClient],
    ) -> None:
        self._store = store
        self._backends = dict(backends)

    def backend_for(self, kind: MediaKind) -> BackendClient:
        return self._backends[kind]

    async def run(
        self,
        kind: MediaKind,
        data: bytes,
        filename: Optional[str] = None,
        *,
        should_abort: Optional[AbortCheck] = None,
    ) -> AnalysisRequest:
        backend = self.backend_for(kind)
        request = AnalysisRequest(kind=kind, filename=filename)
        started = time.perf_counter()

        with backend.in_flight():
            try:
                request.working_path = await self._store.materialize(
                    kind, data, resolve_extension(filename)
                )
                await backend.prepare(request, self._store)
                result = await backend.submit(request, self._store, should_abort=should_abort)
                request.outcome = Succeeded(result)
            except AnalysisError as exc:
                logger.warning(
                    "request=%s kind=%s failed (%s): %s",
                    request.id,
                    kind.value,
                    exc.kind.value,
                    exc,
                )
                request.outcome = Failed(exc.kind, str(exc))
            except Exception as exc:
                logger.exception("request=%s kind=%s failed unexpectedly", request.id, kind.value)
                request.outcome = Failed(ErrorKind.UNEXPECTED, str(exc) or type(exc).__name__)
            finally:
                await self._store.release(request.owned_paths())

        outcome = request.outcome
        label = outcome.error_kind.value if isinstance(outcome, Failed) else "succeeded"
        record_analysis_outcome(kind.value, label)
        logger.info(
            "request=%s kind=%s outcome=%s duration_ms=%.2f",
            request.id,
            kind.value,
            label,
            (time.perf_counter() - started) * 1000,
        )
        return request


def get_orchestrator() -> AnalysisOrchestrator:
    """Return the process-wide orchestrator wired to the configured backends."""
    return _DEFAULT_ORCHESTRATOR


_DEFAULT_ORCHESTRATOR = AnalysisOrchestrator(
    get_artifact_store(),
    {
        MediaKind.IMAGE: get_image_backend(),
        MediaKind.AUDIO: get_audio_backend(),
    },
)


__all__ = ["AnalysisOrchestrator", "get_orchestrator"]
