# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Opening the application database.

:func:`open_database` is called once at process start: it opens the
connection, switches on foreign keys, applies every pending migration and
hands back a ready :class:`Database`. Any other database work must wait until
it returns.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from homevault.core.clock import Clock

from . import maintenance
from .ledger import LEDGER_TABLE, LedgerEntry, MigrationLedger
from .migrations import MigrationEngine, MigrationStep
from .reset import reset_all
from .schema import ALL_STEPS
from .sqlite.db_writer import DbWriter
from .sqlite.utils import open_db

log = logging.getLogger(__name__)

__all__ = [
    "Database",
    "DatabaseError",
    "IntegrityCheckFailed",
    "MEMORY",
    "open_database",
]

MEMORY = ":memory:"

T = TypeVar("T")


class DatabaseError(RuntimeError):
    """Base class for database handle failures."""


class IntegrityCheckFailed(DatabaseError):
    def __init__(self, path: str, report: list[str]):
        self.path = path
        self.report = report
        super().__init__(f"Integrity check failed for {path}: {'; '.join(report[:5])}")


@dataclass
class Database:
    """An open, fully migrated application database."""

    path: str
    conn: sqlite3.Connection
    writer: DbWriter | None = None
    ledger_table: str = LEDGER_TABLE
    # identifiers applied while opening, empty when already current
    migrated: list[str] = field(default_factory=list)

    @property
    def ledger(self) -> MigrationLedger:
        return MigrationLedger(self.conn, table=self.ledger_table)

    def applied_migrations(self) -> list[LedgerEntry]:
        return self.ledger.applied()

    def write(self, func: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``func`` through the writer queue when one is attached."""

        if self.writer is not None:
            return self.writer.run(func)
        return func(self.conn)

    def reset_all(self, *, clear_ledger: bool = False) -> dict[str, int]:
        """Erase all application rows; see :func:`homevault.storage.reset.reset_all`."""

        return self.write(
            lambda conn: reset_all(conn, ledger_table=self.ledger_table, clear_ledger=clear_ledger)
        )

    def check_integrity(self) -> bool:
        return self.write(maintenance.check_integrity)

    def require_integrity(self) -> None:
        report = self.write(maintenance.integrity_report)
        if report != ["ok"]:
            raise IntegrityCheckFailed(self.path, report)

    def optimize(self) -> None:
        self.write(maintenance.optimize)

    def close(self) -> None:
        if self.writer is not None:
            self.writer.close()
        if self.path != MEMORY:
            maintenance.checkpoint_full(self.conn)
        self.conn.close()
        log.debug("Database closed: %s", self.path)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


def open_database(
    path: str | os.PathLike[str] = MEMORY,
    *,
    steps: Iterable[MigrationStep] = ALL_STEPS,
    use_writer: bool = False,
    clock: Clock | None = None,
    ledger_table: str = LEDGER_TABLE,
    pragmas: dict[str, object] | None = None,
) -> Database:
    """Open ``path`` (``":memory:"`` for tests) and migrate it to the latest schema.

    Raises :class:`~homevault.storage.migrations.MigrationStepFailed` when a
    step fails; the connection is closed before the error propagates.
    """

    db_path = str(path)
    if db_path != MEMORY:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        opts: dict[str, object] = {"journal_mode": "WAL", "synchronous": "NORMAL"}
    else:
        opts = {}
    opts.update(pragmas or {})

    conn = open_db(db_path, pragmas=opts)
    try:
        engine = MigrationEngine(conn, ledger_table=ledger_table, clock=clock)
        migrated = engine.apply(steps)
    except BaseException:
        conn.close()
        raise

    writer = DbWriter(connection=conn) if use_writer else None
    log.info("Database initialized at: %s", db_path)
    return Database(
        path=db_path,
        conn=conn,
        writer=writer,
        ledger_table=ledger_table,
        migrated=migrated,
    )
