# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Durable record of applied migration steps.

The ledger is a plain table inside the migrated database::

    schema_migrations(identifier TEXT PRIMARY KEY, applied_at TEXT)

External tools can read it to learn the schema state without importing this
package. Entries are append-only; only a full destructive reset that opts in
may clear them. ``has_applied`` and ``record_applied`` are meant to run inside
the same transaction as the step they gate.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from datetime import datetime

from pydantic import BaseModel

from homevault.core.clock import isoformat_utc

log = logging.getLogger(__name__)

__all__ = ["LEDGER_TABLE", "LedgerEntry", "MigrationLedger"]

LEDGER_TABLE = "schema_migrations"

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class LedgerEntry(BaseModel):
    identifier: str
    applied_at: str | None = None


class MigrationLedger:
    """Read/write access to the applied-migrations table on ``conn``."""

    def __init__(self, conn: sqlite3.Connection, *, table: str = LEDGER_TABLE) -> None:
        if not _IDENT_RE.match(table):
            raise ValueError(f"Invalid ledger table name: {table!r}")
        self.conn = conn
        self.table = table

    def ensure_table(self) -> None:
        """Create the ledger table if needed (idempotent, autocommitted DDL)."""

        self.conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                identifier TEXT PRIMARY KEY,
                applied_at TEXT
            )
            """
        )

    def exists(self) -> bool:
        row = self.conn.execute(
            "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?",
            (self.table,),
        ).fetchone()
        return bool(row and row[0])

    def has_applied(self, identifier: str) -> bool:
        row = self.conn.execute(
            f"SELECT 1 FROM {self.table} WHERE identifier = ?",
            (identifier,),
        ).fetchone()
        return row is not None

    def record_applied(self, identifier: str, at: datetime) -> None:
        """Append ``identifier``; recording the same step twice is an error."""

        self.conn.execute(
            f"INSERT INTO {self.table}(identifier, applied_at) VALUES (?, ?)",
            (identifier, isoformat_utc(at)),
        )
        log.debug("Ledger recorded %s", identifier)

    def applied(self) -> list[LedgerEntry]:
        """Return all entries ordered by identifier."""

        if not self.exists():
            return []
        rows = self.conn.execute(
            f"SELECT identifier, applied_at FROM {self.table} ORDER BY identifier ASC"
        ).fetchall()
        return [LedgerEntry(identifier=str(row[0]), applied_at=row[1]) for row in rows]

    def applied_identifiers(self) -> set[str]:
        return {entry.identifier for entry in self.applied()}

    def clear(self) -> int:
        """Remove every entry. Only used by an opted-in destructive reset."""

        cur = self.conn.execute(f"DELETE FROM {self.table}")
        return int(cur.rowcount or 0)
