# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Content-addressed attachment storage."""

from homevault.blobs.errors import (
    BlobNotFound,
    BlobStoreError,
    DecodingFailed,
    DigestCollision,
    EncodingFailed,
    InvalidBlobPath,
    PayloadTooLarge,
)
from homevault.blobs.hashing import DIGEST_LENGTH, content_digest
from homevault.blobs.models import StorageStats, StoreResult
from homevault.blobs.paths import path_for, resolve_extension
from homevault.blobs.store import DEFAULT_MAX_BLOB_SIZE, BlobStore

__all__ = [
    "BlobStore",
    "StoreResult",
    "StorageStats",
    "DEFAULT_MAX_BLOB_SIZE",
    "DIGEST_LENGTH",
    "content_digest",
    "path_for",
    "resolve_extension",
    "BlobStoreError",
    "PayloadTooLarge",
    "BlobNotFound",
    "InvalidBlobPath",
    "EncodingFailed",
    "DecodingFailed",
    "DigestCollision",
]
