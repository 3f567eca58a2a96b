# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Content digests used as blob file names.

The digest is a SHA-256 hex string truncated to ``DIGEST_LENGTH`` characters.
Sixteen hex characters (64 bits) keep file names short; the trade-off is a
collision space far smaller than the full hash. A truncated digest is a
deduplication key, not a security primitive.
"""

from __future__ import annotations

import hashlib

__all__ = [
    "DIGEST_LENGTH",
    "FULL_DIGEST_LENGTH",
    "MIN_DIGEST_LENGTH",
    "content_digest",
    "validate_digest_length",
]

DIGEST_LENGTH = 16  # hex chars, 64 bits
FULL_DIGEST_LENGTH = 64
MIN_DIGEST_LENGTH = 8


def validate_digest_length(length: int) -> int:
    """Return ``length`` if it is a usable (even, in range) truncation, else raise ``ValueError``."""

    length = int(length)
    if not MIN_DIGEST_LENGTH <= length <= FULL_DIGEST_LENGTH:
        raise ValueError(
            f"digest length must be between {MIN_DIGEST_LENGTH} and "
            f"{FULL_DIGEST_LENGTH}, got {length}"
        )
    if length % 2:
        raise ValueError(f"digest length must be even (whole bytes), got {length}")
    return length


def content_digest(data: bytes, *, length: int = DIGEST_LENGTH) -> str:
    """Return the lowercase hex digest prefix for ``data``.

    Deterministic for any finite input, including ``b""``.
    """

    length = validate_digest_length(length)
    return hashlib.sha256(bytes(data)).hexdigest()[:length]
