"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.pipelines.analysis import AnalysisOrchestrator, get_orchestrator
from app.services import (
    AudioBackendClient,
    ImageBackendClient,
    get_audio_backend,
    get_image_backend,
)

OrchestratorDep = Annotated[AnalysisOrchestrator, Depends(get_orchestrator)]
ImageBackendDep = Annotated[ImageBackendClient, Depends(get_image_backend)]
AudioBackendDep = Annotated[AudioBackendClient, Depends(get_audio_backend)]


__all__ = ["AudioBackendDep", "ImageBackendDep", "OrchestratorDep"]
