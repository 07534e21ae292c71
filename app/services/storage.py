"""Scratch-directory storage for per-request analysis artifacts."""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any, Iterable
from uuid import uuid4

from fastapi.concurrency import run_in_threadpool

from app.config.settings import ScratchConfig, settings
from app.domain import ArtifactIOError, MediaKind

logger = logging.getLogger("app.services.analysis_pipeline")


class ArtifactStore:
    """Create uniquely named scratch files and remove them unconditionally.

    Every file name embeds a fresh ``uuid4`` so concurrent requests never
    collide and no locking is needed for creation.
    """

    def __init__(
        self,
        image_dir: str | Path,
        audio_dir: str | Path,
        output_dir: str | Path,
    ) -> None:
        self._dirs = {
            MediaKind.IMAGE: Path(image_dir),
            MediaKind.AUDIO: Path(audio_dir),
        }
        self._output_dir = Path(output_dir)

    @classmethod
    def from_config(cls, config: ScratchConfig) -> "ArtifactStore":
        return cls(config.image_dir, config.audio_dir, config.output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def directory_for(self, kind: MediaKind) -> Path:
        return self._dirs[kind]

    async def materialize(
        self,
        kind: MediaKind,
        data: bytes,
        suggested_extension: str | None = None,
    ) -> Path:
        """Write the upload into the kind's scratch directory and return its path."""

        extension = suggested_extension or kind.default_extension
        if not extension.startswith("."):
            extension = f".{extension}"
        target = self._dirs[kind] / f"{uuid4().hex}{extension}"
        try:
            await run_in_threadpool(self._write_bytes, target, data)
        except OSError as exc:
            raise ArtifactIOError(f"Failed to store {kind.value} upload: {exc}") from exc

        logger.debug("Materialized %s upload at %s (%d bytes)", kind.value, target, len(data))
        return target

    async def write_descriptor(self, kind: MediaKind, payload: dict[str, Any]) -> Path:
        """Write a JSON request descriptor next to the kind's uploads."""

        target = self._dirs[kind] / f"{uuid4().hex}.json"
        encoded = json.dumps(payload).encode("utf-8")
        try:
            await run_in_threadpool(self._write_bytes, target, encoded)
        except OSError as exc:
            raise ArtifactIOError(f"Failed to write request descriptor: {exc}") from exc
        return target

    async def ensure_output_dir(self) -> Path:
        try:
            await run_in_threadpool(self._output_dir.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactIOError(f"Failed to prepare output directory: {exc}") from exc
        return self._output_dir

    def output_path_for(self, pointer: str) -> Path:
        """Map a backend-side result pointer to the gateway's output directory."""

        name = PurePosixPath(pointer.replace("\\", "/")).name
        if not name or name in {".", ".."}:
            raise ValueError(f"Result pointer has no file name: {pointer!r}")
        return self._output_dir / name

    async def read_text(self, path: Path) -> str:
        try:
            return await run_in_threadpool(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise ArtifactIOError(f"Failed to read result file {path}: {exc}") from exc

    async def release(self, paths: Iterable[Path]) -> None:
        """Remove each path if present; a failed removal never blocks the others."""

        for path in paths:
            try:
                await run_in_threadpool(path.unlink, missing_ok=True)
            except OSError:
                logger.exception("Failed to remove scratch artifact %s", path)

    @staticmethod
    def _write_bytes(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


def get_artifact_store() -> ArtifactStore:
    """Return the process-wide artifact store."""
    return _DEFAULT_STORE


_DEFAULT_STORE = ArtifactStore.from_config(settings.scratch)


__all__ = ["ArtifactStore", "get_artifact_store"]
