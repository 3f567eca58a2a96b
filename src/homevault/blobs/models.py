# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreResult(BaseModel):
    """Outcome of a successful ``BlobStore.store`` call."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    byte_size: int = Field(ge=0)
    was_deduplicated: bool = False
    digest: str
    extension: str
    mime_type: str

    @field_validator("digest")
    def _digest_hex(cls, value: str) -> str:
        if not value or any(ch not in "0123456789abcdef" for ch in value):
            raise ValueError("digest must be lowercase hexadecimal")
        return value


class StorageStats(BaseModel):
    file_count: int = 0
    total_bytes: int = 0
