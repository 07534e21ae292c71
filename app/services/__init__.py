"""Service layer helpers for scratch storage and backend integrations."""

from .availability import (
    AvailabilityReport,
    AvailabilityStatus,
    BusyTracker,
    get_audio_tracker,
    probe_backend,
)
from .backends import (
    AudioBackendClient,
    BackendClient,
    ImageBackendClient,
    get_audio_backend,
    get_image_backend,
)
from .polling import await_file
from .storage import ArtifactStore, get_artifact_store

__all__ = [
    "ArtifactStore",
    "AudioBackendClient",
    "AvailabilityReport",
    "AvailabilityStatus",
    "BackendClient",
    "BusyTracker",
    "ImageBackendClient",
    "await_file",
    "get_artifact_store",
    "get_audio_backend",
    "get_audio_tracker",
    "get_image_backend",
    "probe_backend",
]
