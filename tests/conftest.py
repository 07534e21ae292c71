"""Shared fixtures: scratch directories under tmp_path and mocked backends."""

from __future__ import annotations

import inspect
from pathlib import Path
import sys
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.config.settings import (  # noqa: E402
    AudioBackendConfig,
    ImageBackendConfig,
    PollingConfig,
)
from app.domain import MediaKind  # noqa: E402
from app.main import app  # noqa: E402
from app.pipelines.analysis import AnalysisOrchestrator, get_orchestrator  # noqa: E402
from app.services import (  # noqa: E402
    ArtifactStore,
    AudioBackendClient,
    BusyTracker,
    ImageBackendClient,
    get_audio_backend,
    get_image_backend,
)

Handler = Callable[[httpx.Request], Any]


class BackendStub:
    """Mock backend recording every request and answering via a swappable handler."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.handler: Handler = lambda request: httpx.Response(404)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        result = self.handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def submissions(self) -> list[httpx.Request]:
        return [call for call in self.calls if call.method == "POST"]


def scratch_files(store: ArtifactStore) -> list[Path]:
    """Every file left in the scratch and output directories."""

    found: list[Path] = []
    for directory in (
        store.directory_for(MediaKind.IMAGE),
        store.directory_for(MediaKind.AUDIO),
        store.output_dir,
    ):
        if directory.exists():
            found.extend(path for path in directory.iterdir())
    return found


@pytest.fixture
def store(tmp_path: Path) -> ArtifactStore:
    return ArtifactStore(
        tmp_path / "test_images",
        tmp_path / "test_audio",
        tmp_path / "output",
    )


@pytest.fixture
def leftovers(store: ArtifactStore) -> Callable[[], list[Path]]:
    return lambda: scratch_files(store)


@pytest.fixture
def polling() -> PollingConfig:
    return PollingConfig(timeout=1.0, interval=0.02)


@pytest.fixture
def tracker() -> BusyTracker:
    return BusyTracker()


@pytest.fixture
def image_stub() -> BackendStub:
    return BackendStub()


@pytest.fixture
def audio_stub() -> BackendStub:
    return BackendStub()


@pytest.fixture
def image_backend(image_stub: BackendStub, polling: PollingConfig) -> ImageBackendClient:
    return ImageBackendClient(ImageBackendConfig(), polling, transport=image_stub.transport)


@pytest.fixture
def audio_backend(audio_stub: BackendStub, tracker: BusyTracker) -> AudioBackendClient:
    return AudioBackendClient(AudioBackendConfig(), tracker, transport=audio_stub.transport)


@pytest.fixture
def orchestrator(
    store: ArtifactStore,
    image_backend: ImageBackendClient,
    audio_backend: AudioBackendClient,
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        store,
        {MediaKind.IMAGE: image_backend, MediaKind.AUDIO: audio_backend},
    )


@pytest.fixture
def gateway(
    orchestrator: AnalysisOrchestrator,
    image_backend: ImageBackendClient,
    audio_backend: AudioBackendClient,
):
    """The FastAPI app wired to the mocked backends and tmp scratch space."""

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_image_backend] = lambda: image_backend
    app.dependency_overrides[get_audio_backend] = lambda: audio_backend

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(gateway) -> TestClient:
    with TestClient(gateway) as test_client:
        yield test_client
