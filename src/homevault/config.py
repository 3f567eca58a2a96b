# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Storage settings.

Defaults match the shipped application (50 MiB attachments, JPEG quality 80,
16 hex character digests). ``StorageSettings.from_env`` lets deployments and
tests override them through ``HOMEVAULT_*`` environment variables.
"""

from __future__ import annotations

import os
import platform
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from homevault.blobs.hashing import DIGEST_LENGTH, validate_digest_length
from homevault.blobs.images import DEFAULT_JPEG_QUALITY, validate_jpeg_quality
from homevault.blobs.store import DEFAULT_MAX_BLOB_SIZE

__all__ = ["APP_NAME", "StorageSettings", "default_data_dir"]

APP_NAME = "HomeVault"

_ENV_FIELDS = {
    "HOMEVAULT_DATA_DIR": "data_dir",
    "HOMEVAULT_MAX_BLOB_SIZE": "max_blob_size",
    "HOMEVAULT_JPEG_QUALITY": "jpeg_quality",
    "HOMEVAULT_DIGEST_LENGTH": "digest_length",
}


def default_data_dir(app_name: str = APP_NAME, environ: Mapping[str, str] | None = None) -> Path:
    """Platform-specific application data directory (not created here)."""

    env = os.environ if environ is None else environ
    system = platform.system().lower()
    home = Path.home()

    if system == "darwin":
        return home / "Library" / "Application Support" / app_name
    if system == "windows":
        return Path(env.get("LOCALAPPDATA", str(home / "AppData" / "Local"))) / app_name
    return Path(env.get("XDG_DATA_HOME", str(home / ".local" / "share"))) / app_name


class StorageSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(default_factory=default_data_dir)
    database_name: str = "homemaint.db"
    blob_dir_name: str = "uploads"
    max_blob_size: int = Field(default=DEFAULT_MAX_BLOB_SIZE, gt=0)
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    digest_length: int = DIGEST_LENGTH
    verify_dedup: bool = False

    # Same bounds BlobStore enforces.
    @field_validator("jpeg_quality")
    def _jpeg_quality_in_range(cls, value: int) -> int:
        return validate_jpeg_quality(value)

    @field_validator("digest_length")
    def _digest_length_in_range(cls, value: int) -> int:
        return validate_digest_length(value)

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_name

    @property
    def blob_root(self) -> Path:
        return self.data_dir / self.blob_dir_name

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> StorageSettings:
        """Build settings from ``HOMEVAULT_*`` variables; ``overrides`` win."""

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for var, field_name in _ENV_FIELDS.items():
            raw = env.get(var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        if "data_dir" not in values:
            values["data_dir"] = default_data_dir(environ=env)
        values.update(overrides)
        return cls(**values)
