# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Database upkeep: integrity checks, ANALYZE/VACUUM, WAL checkpoints."""

from __future__ import annotations

import contextlib
import logging
import sqlite3

log = logging.getLogger(__name__)

__all__ = [
    "check_integrity",
    "integrity_report",
    "checkpoint_full",
    "optimize",
]


def integrity_report(conn: sqlite3.Connection) -> list[str]:
    """Return the raw ``PRAGMA integrity_check`` rows (``["ok"]`` when healthy)."""

    return [str(row[0]) for row in conn.execute("PRAGMA integrity_check").fetchall()]


def check_integrity(conn: sqlite3.Connection) -> bool:
    report = integrity_report(conn)
    healthy = report == ["ok"]
    if not healthy:
        log.error("Integrity check failed: %s", "; ".join(report[:10]))
    return healthy


def checkpoint_full(conn: sqlite3.Connection) -> None:
    """Request a FULL WAL checkpoint, ignoring unsupported configurations."""

    with contextlib.suppress(sqlite3.DatabaseError):
        conn.execute("PRAGMA wal_checkpoint(FULL)")


def optimize(conn: sqlite3.Connection) -> None:
    """ANALYZE then VACUUM. Must run outside any open transaction."""

    if conn.in_transaction:
        raise RuntimeError("optimize cannot run inside an open transaction")
    conn.execute("ANALYZE")
    conn.execute("VACUUM")
    log.info("Database optimized")
