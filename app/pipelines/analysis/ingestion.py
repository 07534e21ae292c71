"""Request ingestion helpers (first stage of the analysis pipeline)."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from fastapi import UploadFile

from app.domain import MediaKind, UploadValidationError


async def read_upload(upload: Optional[UploadFile], kind: MediaKind) -> bytes:
    """Load the upload fully into memory, rejecting missing or empty payloads.

    Runs before any scratch directory is touched so validation failures leave
    nothing behind.
    """

    if upload is None or not upload.filename:
        raise UploadValidationError(f"No {kind.value} file provided")

    data = await upload.read()
    await upload.close()

    if not data:
        raise UploadValidationError(f"Uploaded {kind.value} file is empty")
    return data


def resolve_extension(filename: Optional[str]) -> Optional[str]:
    """Return the original file's extension, or None so the kind default applies."""

    if not filename:
        return None
    suffix = PurePath(filename.replace("\\", "/")).suffix
    return suffix or None


__all__ = ["read_upload", "resolve_extension"]
