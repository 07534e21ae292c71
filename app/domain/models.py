"""Typed containers shared across the analysis pipeline.

These live outside the pipeline package so the services (`storage`,
`backends`, `polling`) and the orchestrator can import them without circular
imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union
from uuid import uuid4

from .errors import ErrorKind


class MediaKind(str, Enum):
    """Media type accepted by the gateway; selects adapter and scratch directory."""

    IMAGE = "image"
    AUDIO = "audio"

    @property
    def default_extension(self) -> str:
        return ".jpg" if self is MediaKind.IMAGE else ".wav"


@dataclass(frozen=True)
class Pending:
    """Outcome of a request that has not finished yet."""


@dataclass(frozen=True)
class Succeeded:
    """Terminal outcome carrying the backend's parsed result."""

    result: Any


@dataclass(frozen=True)
class Failed:
    """Terminal outcome carrying the failure category and a readable message."""

    error_kind: ErrorKind
    message: str


Outcome = Union[Pending, Succeeded, Failed]


@dataclass
class AnalysisRequest:
    """Ephemeral per-call state, discarded once the response is sent."""

    kind: MediaKind
    filename: str | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    working_path: Path | None = None
    descriptor_path: Path | None = None
    result_path: Path | None = None
    outcome: Outcome = field(default_factory=Pending)

    @property
    def is_terminal(self) -> bool:
        return not isinstance(self.outcome, Pending)

    def owned_paths(self) -> list[Path]:
        """Return every scratch artifact created for this request so far."""

        return [
            path
            for path in (self.working_path, self.descriptor_path, self.result_path)
            if path is not None
        ]


__all__ = [
    "AnalysisRequest",
    "Failed",
    "MediaKind",
    "Outcome",
    "Pending",
    "Succeeded",
]
