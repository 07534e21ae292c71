"""HTTP adapters for the image and audio analysis backends.

Both backends share a filesystem namespace with the gateway: submissions carry
backend-visible paths, never the media bytes. The adapters differ in how a
result comes back:

* image: the direct response either embeds the results or points at a result
  file that the gateway waits for in the shared output directory;
* audio: a descriptor file names the input, and the direct response carries a
  completion status plus the result list.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx

from app.config.settings import (
    AudioBackendConfig,
    ImageBackendConfig,
    PollingConfig,
    settings,
)
from app.domain import (
    AnalysisError,
    AnalysisRequest,
    ArtifactIOError,
    BackendContractError,
    BackendUnavailableError,
    MalformedResultError,
    MediaKind,
    ProcessingTimeoutError,
)
from app.services.availability import (
    AvailabilityReport,
    BusyTracker,
    get_audio_tracker,
    probe_backend,
)
from app.services.polling import AbortCheck, await_file
from app.services.storage import ArtifactStore

logger = logging.getLogger("app.services.analysis_pipeline")


def _backend_path(prefix: str, name: str) -> str:
    return f"{prefix.rstrip('/')}/{name}"


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _materialized(path: Optional[Path], what: str, request: AnalysisRequest) -> Path:
    if path is None:
        raise ArtifactIOError(f"No {what} was written for request {request.id}")
    return path


class BackendClient(ABC):
    """Submit a materialized file to one backend and produce its result."""

    kind: MediaKind
    label: str

    def __init__(
        self,
        config: ImageBackendConfig | AudioBackendConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def submit_url(self) -> str:
        return self._config.url.rstrip("/") + self._config.submit_path

    @property
    def health_url(self) -> str:
        return self._config.url.rstrip("/") + self._config.health_path

    def in_flight(self) -> AbstractContextManager[Any]:
        """Scope covering the request from preparation until cleanup has run."""

        return nullcontext()

    async def prepare(self, request: AnalysisRequest, store: ArtifactStore) -> None:
        """Create any backend-specific artifacts beyond the uploaded file."""

    @abstractmethod
    async def submit(
        self,
        request: AnalysisRequest,
        store: ArtifactStore,
        *,
        should_abort: Optional[AbortCheck] = None,
    ) -> Any:
        """Hand the request to the backend and return its parsed result."""

    async def probe(self) -> AvailabilityReport:
        return await probe_backend(
            self.health_url,
            timeout=self._config.health_timeout,
            transport=self._transport,
        )

    async def _post(
        self,
        payload: Mapping[str, Any],
        *,
        request_id: str,
    ) -> dict[str, Any]:
        """POST a JSON submission and return the decoded JSON object."""

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._config.request_timeout,
        ) as client:
            try:
                response = await client.post(
                    self.submit_url,
                    json=dict(payload),
                    headers={"X-Request-ID": request_id},
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise BackendUnavailableError(
                    f"{self.label} returned HTTP {exc.response.status_code}"
                ) from exc
            except httpx.RequestError as exc:
                raise self._transport_error(exc) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendContractError(f"Invalid response from {self.label}: body is not JSON") from exc
        if not isinstance(data, dict):
            raise BackendContractError(f"Invalid response from {self.label}: expected a JSON object")
        return data

    def _transport_error(self, exc: httpx.RequestError) -> AnalysisError:
        return BackendUnavailableError(f"Unable to reach {self.label}: {_describe(exc)}")


class ImageBackendClient(BackendClient):
    """Image backend: inline results or a pointer to a result file."""

    kind = MediaKind.IMAGE
    label = "image backend"

    def __init__(
        self,
        config: ImageBackendConfig,
        polling: PollingConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config, transport=transport)
        self._polling = polling

    async def prepare(self, request: AnalysisRequest, store: ArtifactStore) -> None:
        await store.ensure_output_dir()

    async def submit(
        self,
        request: AnalysisRequest,
        store: ArtifactStore,
        *,
        should_abort: Optional[AbortCheck] = None,
    ) -> Any:
        working_path = _materialized(request.working_path, "input file", request)
        payload = {
            "paths": {
                "input": _backend_path(self._config.input_prefix, working_path.name),
                "output": self._config.output_prefix,
            }
        }
        data = await self._post(payload, request_id=request.id)

        status = data.get("status")
        if status not in self._config.success_statuses:
            raise BackendContractError(f"Invalid response from {self.label}: status={status!r}")

        results = data.get("results")
        has_results = isinstance(results, list) and bool(results)
        first = results[0] if has_results else None

        if isinstance(first, Mapping) and first.get("result_path"):
            try:
                request.result_path = store.output_path_for(str(first["result_path"]))
            except ValueError as exc:
                raise BackendContractError(str(exc)) from exc
            return await self._collect_result_file(request, request.result_path, store, should_abort)

        # Inline answers are returned whole, minus the status marker.
        if has_results or isinstance(data.get("result"), Mapping):
            return {key: value for key, value in data.items() if key != "status"}

        raise BackendContractError(f"Invalid response from {self.label}: no results in response")

    async def _collect_result_file(
        self,
        request: AnalysisRequest,
        result_path: Path,
        store: ArtifactStore,
        should_abort: Optional[AbortCheck],
    ) -> Any:
        logger.info("request=%s waiting for result file %s", request.id, result_path)
        await await_file(
            result_path,
            timeout=self._polling.timeout,
            poll_interval=self._polling.interval,
            should_abort=should_abort,
        )
        raw = await store.read_text(result_path)
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise MalformedResultError(
                f"Result file {result_path.name} is not valid JSON: {exc}"
            ) from exc


class AudioBackendClient(BackendClient):
    """Audio backend: descriptor file in, completion status and results out."""

    kind = MediaKind.AUDIO
    label = "audio backend"

    def __init__(
        self,
        config: AudioBackendConfig,
        tracker: BusyTracker,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config, transport=transport)
        self._tracker = tracker

    @property
    def tracker(self) -> BusyTracker:
        return self._tracker

    def in_flight(self) -> AbstractContextManager[Any]:
        return self._tracker.track()

    async def prepare(self, request: AnalysisRequest, store: ArtifactStore) -> None:
        working_path = _materialized(request.working_path, "input file", request)
        descriptor = {
            "files": [
                {"path": _backend_path(self._config.input_prefix, working_path.name)},
            ]
        }
        request.descriptor_path = await store.write_descriptor(self.kind, descriptor)

    async def submit(
        self,
        request: AnalysisRequest,
        store: ArtifactStore,
        *,
        should_abort: Optional[AbortCheck] = None,
    ) -> Any:
        descriptor_path = _materialized(request.descriptor_path, "descriptor", request)
        payload = {
            "input_json_path": _backend_path(self._config.input_prefix, descriptor_path.name),
            "output_dir": self._config.output_prefix,
        }
        data = await self._post(payload, request_id=request.id)
        logger.info("request=%s audio backend answered status=%s", request.id, data.get("status"))

        results = data.get("results")
        if data.get("status") != "completed" or not isinstance(results, list) or not results:
            raise BackendContractError(f"Invalid response from {self.label}")
        first = results[0]
        if not isinstance(first, Mapping):
            raise BackendContractError(f"Invalid response from {self.label}: result entry is not an object")
        return dict(first)

    async def probe(self) -> AvailabilityReport:
        return await probe_backend(
            self.health_url,
            timeout=self._config.health_timeout,
            tracker=self._tracker,
            transport=self._transport,
        )

    def _transport_error(self, exc: httpx.RequestError) -> AnalysisError:
        if isinstance(exc, (httpx.TimeoutException, httpx.ReadError, httpx.RemoteProtocolError)):
            return ProcessingTimeoutError(
                "Audio processing took too long or the connection was reset. "
                "Try a shorter recording."
            )
        return super()._transport_error(exc)


def get_image_backend() -> ImageBackendClient:
    """Return the process-wide image backend client."""
    return _IMAGE_BACKEND


def get_audio_backend() -> AudioBackendClient:
    """Return the process-wide audio backend client."""
    return _AUDIO_BACKEND


_IMAGE_BACKEND = ImageBackendClient(settings.image_backend, settings.polling)
_AUDIO_BACKEND = AudioBackendClient(settings.audio_backend, get_audio_tracker())


__all__ = [
    "AudioBackendClient",
    "BackendClient",
    "ImageBackendClient",
    "get_audio_backend",
    "get_image_backend",
]
