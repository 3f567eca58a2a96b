# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Relative path scheme for stored blobs.

Layout::

    <root>/
        2025/
            01/
                3f9a0c1d2e4b5a68.jpg
                77c2d0e1a9b8f634.pdf
            02/
                ...

Blobs are sharded by the calendar month in which they were stored. The layout
is read by backup and export tooling, so the format must stay stable.
"""

from __future__ import annotations

import mimetypes
from datetime import datetime
from pathlib import PurePosixPath

from .errors import InvalidBlobPath

__all__ = [
    "FALLBACK_EXTENSION",
    "MIME_EXTENSIONS",
    "path_for",
    "extension_for_mime",
    "mime_for_extension",
    "resolve_extension",
    "validate_relative_path",
]

FALLBACK_EXTENSION = "dat"

MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/heic": "heic",
    "application/pdf": "pdf",
    "text/plain": "txt",
}


def path_for(digest: str, extension: str, at: datetime) -> str:
    """Return ``"{YYYY}/{MM}/{digest}.{extension}"`` for a blob stored at ``at``."""

    if not digest:
        raise ValueError("digest must be a non-empty string")
    extension = extension.lstrip(".") or FALLBACK_EXTENSION
    return f"{at.year:04d}/{at.month:02d}/{digest}.{extension}"


def extension_for_mime(mime_type: str | None) -> str:
    """Map a declared MIME type onto its canonical file extension."""

    if not mime_type:
        return FALLBACK_EXTENSION
    return MIME_EXTENSIONS.get(mime_type.strip().lower(), FALLBACK_EXTENSION)


def mime_for_extension(extension: str) -> str:
    """Best-effort reverse lookup used when a caller supplied only a file name."""

    ext = extension.lstrip(".").lower()
    for mime, known in MIME_EXTENSIONS.items():
        if known == ext:
            return mime
    guessed, _ = mimetypes.guess_type(f"blob.{ext}")
    return guessed or "application/octet-stream"


def resolve_extension(filename: str | None, mime_type: str | None) -> str:
    """Extension from ``filename`` when it has one, else from ``mime_type``."""

    if filename:
        suffix = PurePosixPath(filename.replace("\\", "/")).suffix
        if len(suffix) > 1:
            return suffix[1:]
    return extension_for_mime(mime_type)


def validate_relative_path(relative_path: str) -> PurePosixPath:
    """Reject absolute paths and paths that would escape the blob root."""

    if not relative_path or not relative_path.strip():
        raise InvalidBlobPath(relative_path)
    candidate = PurePosixPath(relative_path.replace("\\", "/"))
    if not candidate.parts or candidate.is_absolute():
        raise InvalidBlobPath(relative_path)
    if ".." in candidate.parts or ":" in candidate.parts[0]:
        raise InvalidBlobPath(relative_path)
    return candidate
