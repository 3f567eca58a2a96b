# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Typed failures raised by the blob store."""

from __future__ import annotations

__all__ = [
    "BlobStoreError",
    "PayloadTooLarge",
    "BlobNotFound",
    "InvalidBlobPath",
    "EncodingFailed",
    "DecodingFailed",
    "DigestCollision",
]


class BlobStoreError(Exception):
    """Base class for blob store failures."""


class PayloadTooLarge(BlobStoreError):
    """Raised before any I/O when a payload exceeds the configured limit."""

    def __init__(self, actual_size: int, limit: int):
        self.actual_size = int(actual_size)
        self.limit = int(limit)
        super().__init__(
            f"File size ({self.actual_size} bytes) exceeds maximum ({self.limit} bytes)"
        )


class BlobNotFound(BlobStoreError):
    """No blob exists at the given relative path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class InvalidBlobPath(BlobStoreError, ValueError):
    """Relative path is absolute or points outside the blob root."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Invalid blob path: {path!r}")


class EncodingFailed(BlobStoreError):
    """An image could not be re-encoded into bytes."""


class DecodingFailed(BlobStoreError):
    """Stored bytes could not be interpreted as an image."""

    def __init__(self, path: str, reason: str | None = None):
        self.path = path
        message = f"Failed to decode image: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DigestCollision(BlobStoreError):
    """Verified dedup found different bytes already stored under the same path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Digest collision at {path}: stored bytes differ from payload")
