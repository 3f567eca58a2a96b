# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Content-addressed attachment storage on the local file system.

Every payload is stored once under ``{YYYY}/{MM}/{digest}.{ext}`` below the
store root. ``store`` has three outcomes:

* written: new content, new file (atomic temp-file + rename)
* deduplicated: a file already exists at the derived path; nothing is written
* rejected: ``PayloadTooLarge`` or ``EncodingFailed`` before any I/O

An existing path is treated as identical content without comparing bytes
unless ``verify_dedup`` is enabled. Blobs are never moved or renamed, and
empty month directories are left behind by ``delete``.

All methods perform blocking file I/O.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

from homevault import flags
from homevault.core.atomic import atomic_write_bytes, is_temp_name
from homevault.core.clock import Clock, local_now
from homevault.core.units import format_bytes

from .errors import BlobNotFound, DigestCollision, PayloadTooLarge
from .hashing import DIGEST_LENGTH, content_digest, validate_digest_length
from .images import DEFAULT_JPEG_QUALITY, JPEG_MIME, decode_image, encode_jpeg, validate_jpeg_quality
from .models import StorageStats, StoreResult
from .paths import mime_for_extension, path_for, resolve_extension, validate_relative_path

if TYPE_CHECKING:
    from homevault.config import StorageSettings

log = logging.getLogger(__name__)

__all__ = ["BlobStore", "DEFAULT_MAX_BLOB_SIZE"]

DEFAULT_MAX_BLOB_SIZE = 50 * 1024 * 1024  # 50 MiB


class BlobStore:
    """Deduplicating blob store rooted at ``root``.

    Construct one instance at startup and pass it to the layers that persist
    attachments; the returned ``relative_path`` is the only handle callers
    need to keep.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        max_blob_size: int = DEFAULT_MAX_BLOB_SIZE,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        digest_length: int = DIGEST_LENGTH,
        clock: Clock | None = None,
        verify_dedup: bool = False,
    ) -> None:
        if max_blob_size <= 0:
            raise ValueError("max_blob_size must be > 0")
        self.root = Path(root)
        self.max_blob_size = int(max_blob_size)
        self.jpeg_quality = validate_jpeg_quality(jpeg_quality)
        self.digest_length = validate_digest_length(digest_length)
        self.verify_dedup = bool(verify_dedup)
        self._clock: Clock = clock or local_now

        self.root.mkdir(parents=True, exist_ok=True)
        log.debug("Blob storage initialized at %s", self.root)

    @classmethod
    def from_settings(cls, settings: StorageSettings, *, clock: Clock | None = None) -> BlobStore:
        return cls(
            settings.blob_root,
            max_blob_size=settings.max_blob_size,
            jpeg_quality=settings.jpeg_quality,
            digest_length=settings.digest_length,
            clock=clock,
            verify_dedup=settings.verify_dedup or flags.is_enabled("verify_dedup"),
        )

    # ------------------------------------------------------------------ #
    # Store                                                              #
    # ------------------------------------------------------------------ #
    def store(
        self,
        data: bytes,
        mime_type: str | None = None,
        filename: str | None = None,
    ) -> StoreResult:
        """Persist ``data`` and return where it lives.

        The extension comes from ``filename`` when it has one, otherwise from
        ``mime_type`` (``dat`` for unknown types).
        """

        payload = bytes(data)
        size = len(payload)
        if size > self.max_blob_size:
            log.warning(
                "Rejected %s: %s exceeds limit of %s",
                filename or "<payload>",
                format_bytes(size),
                format_bytes(self.max_blob_size),
            )
            raise PayloadTooLarge(size, self.max_blob_size)

        extension = resolve_extension(filename, mime_type)
        digest = content_digest(payload, length=self.digest_length)
        relative_path = path_for(digest, extension, self._clock())
        target = self.root / relative_path
        resolved_mime = mime_type or mime_for_extension(extension)

        if target.is_file():
            if self.verify_dedup and target.read_bytes() != payload:
                raise DigestCollision(relative_path)
            log.info("File already exists (deduplicated): %s", relative_path)
            return StoreResult(
                relative_path=relative_path,
                byte_size=target.stat().st_size,
                was_deduplicated=True,
                digest=digest,
                extension=extension,
                mime_type=resolved_mime,
            )

        target.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_bytes(target, payload)
        log.info("File stored: %s (%s)", relative_path, format_bytes(size))
        return StoreResult(
            relative_path=relative_path,
            byte_size=size,
            was_deduplicated=False,
            digest=digest,
            extension=extension,
            mime_type=resolved_mime,
        )

    def store_image(self, image: Image.Image, filename: str | None = None) -> StoreResult:
        """Re-encode ``image`` as JPEG and store the result.

        The stored extension is always ``jpg`` so the file name matches the
        encoded bytes; only the stem of ``filename`` is informational.
        """

        data = encode_jpeg(image, quality=self.jpeg_quality)
        stem = Path(filename).stem if filename else "image"
        return self.store(data, JPEG_MIME, f"{stem}.jpg")

    # ------------------------------------------------------------------ #
    # Retrieve / delete                                                  #
    # ------------------------------------------------------------------ #
    def absolute_path(self, relative_path: str) -> Path:
        """Return the on-disk location for ``relative_path`` (may not exist)."""

        return self.root.joinpath(*validate_relative_path(relative_path).parts)

    def exists(self, relative_path: str) -> bool:
        return self.absolute_path(relative_path).is_file()

    def retrieve(self, relative_path: str) -> bytes:
        """Return the exact bytes stored at ``relative_path``."""

        target = self.absolute_path(relative_path)
        if not target.is_file():
            raise BlobNotFound(relative_path)
        return target.read_bytes()

    def retrieve_image(self, relative_path: str) -> Image.Image:
        """Load and decode the image stored at ``relative_path``."""

        return decode_image(self.retrieve(relative_path), path=relative_path)

    def delete(self, relative_path: str) -> None:
        """Remove the blob at ``relative_path``; parent directories are kept."""

        target = self.absolute_path(relative_path)
        if not target.is_file():
            raise BlobNotFound(relative_path)
        target.unlink()
        log.info("File deleted: %s", relative_path)

    # ------------------------------------------------------------------ #
    # Diagnostics (full tree walk, O(files))                             #
    # ------------------------------------------------------------------ #
    def _iter_blob_files(self) -> Iterator[Path]:
        for dirpath, _dirnames, filenames in os.walk(self.root):
            for name in filenames:
                if is_temp_name(name):
                    continue
                yield Path(dirpath) / name

    def total_bytes_used(self) -> int:
        """Sum of the sizes of all stored files."""

        total = 0
        for path in self._iter_blob_files():
            try:
                total += path.stat().st_size
            except FileNotFoundError:
                # deleted concurrently
                continue
        return total

    def count_stored_files(self) -> int:
        return sum(1 for _ in self._iter_blob_files())

    def stats(self) -> StorageStats:
        count = 0
        total = 0
        for path in self._iter_blob_files():
            try:
                total += path.stat().st_size
            except FileNotFoundError:
                continue
            count += 1
        return StorageStats(file_count=count, total_bytes=total)

    def __repr__(self) -> str:
        return f"BlobStore(root={str(self.root)!r}, max_blob_size={self.max_blob_size})"
