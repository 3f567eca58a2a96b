# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Crash-safe file writes.

Data goes to a uniquely named temporary file in the destination directory,
is fsynced, then ``os.replace``d over the target. Readers either see no file
or the complete file, never a partial write.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path

log = logging.getLogger(__name__)

__all__ = ["TMP_SUFFIX", "atomic_write_bytes", "fsync_dir", "is_temp_name"]

TMP_SUFFIX = ".tmp"


def is_temp_name(name: str) -> bool:
    """True for in-flight temporary files created by :func:`atomic_write_bytes`."""

    return name.startswith(".") and name.endswith(TMP_SUFFIX)


def fsync_dir(path: Path) -> None:
    """Persist directory entries. No-op where directories cannot be opened (Windows)."""

    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        log.debug("Directory fsync not supported for %s", path)
    finally:
        os.close(fd)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` atomically; the parent directory must exist."""

    path = Path(path)
    with tempfile.NamedTemporaryFile(
        prefix=f".{path.name}.", suffix=TMP_SUFFIX, dir=path.parent, delete=False
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise

    try:
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise
    fsync_dir(path.parent)
