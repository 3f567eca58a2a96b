# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Pillow helpers for lossy photo re-encoding."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from .errors import DecodingFailed, EncodingFailed

log = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_JPEG_QUALITY",
    "JPEG_MIME",
    "MAX_JPEG_QUALITY",
    "decode_image",
    "encode_jpeg",
    "validate_jpeg_quality",
]

DEFAULT_JPEG_QUALITY = 80
MIN_JPEG_QUALITY = 1
# Pillow documents qualities above 95 as wasteful without visible gain.
MAX_JPEG_QUALITY = 95
JPEG_MIME = "image/jpeg"

# Modes JPEG can hold without conversion.
_JPEG_MODES = {"RGB", "L", "CMYK"}


def validate_jpeg_quality(quality: int) -> int:
    quality = int(quality)
    if not MIN_JPEG_QUALITY <= quality <= MAX_JPEG_QUALITY:
        raise ValueError(
            f"jpeg_quality must be between {MIN_JPEG_QUALITY} and {MAX_JPEG_QUALITY}, got {quality}"
        )
    return quality


def encode_jpeg(image: Image.Image, *, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Return JPEG bytes for ``image`` at ``quality``.

    Alpha and palette images are flattened to RGB first. Any Pillow failure is
    surfaced as :class:`EncodingFailed`.
    """

    if not isinstance(image, Image.Image):
        raise EncodingFailed(f"Expected a PIL image, got {type(image).__name__}")
    try:
        source = image if image.mode in _JPEG_MODES else image.convert("RGB")
        buffer = io.BytesIO()
        source.save(buffer, format="JPEG", quality=validate_jpeg_quality(quality))
    except (OSError, ValueError) as exc:
        log.warning("JPEG encoding failed: %s", exc)
        raise EncodingFailed(f"Failed to compress image: {exc}") from exc
    data = buffer.getvalue()
    if not data:
        raise EncodingFailed("Failed to compress image: encoder produced no data")
    return data


def decode_image(data: bytes, *, path: str = "<memory>") -> Image.Image:
    """Decode ``data`` into a fully loaded PIL image."""

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodingFailed(path, str(exc)) from exc
    return image
