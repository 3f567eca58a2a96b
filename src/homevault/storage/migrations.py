# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Forward-only, ledger-gated schema migrations.

Each :class:`MigrationStep` runs exactly once per database, in the order the
caller supplies, inside its own ``BEGIN IMMEDIATE`` transaction together with
its ledger row. A failing step is rolled back completely and stops the run;
later steps are never attempted because they may depend on it.

Releases evolve the schema by appending steps to the list passed to
:meth:`MigrationEngine.apply`; re-running the same or a longer list is safe.

Steps that restructure a table must build a replacement table, copy the
rows across (with an explicit fallback for rows that would violate the new
constraints), drop the original and rename the replacement. Foreign key
enforcement is switched off for the duration of :meth:`MigrationEngine.apply`
so that dropping a parent table does not cascade into child rows; each step
is checked with ``PRAGMA foreign_key_check`` before it commits.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from homevault.core.clock import Clock, utc_now

from .ledger import LEDGER_TABLE, MigrationLedger
from .sqlite.utils import execute_script, foreign_keys_enabled, transaction

log = logging.getLogger(__name__)

__all__ = [
    "MigrationStep",
    "MigrationEngine",
    "MigrationError",
    "MigrationOrderError",
    "MigrationStepFailed",
    "validate_steps",
]


class MigrationError(RuntimeError):
    """Base class for migration failures."""


class MigrationOrderError(MigrationError, ValueError):
    """Step list has duplicate or out-of-order identifiers."""


class MigrationStepFailed(MigrationError):
    """A step raised; its transaction was rolled back and the run stopped.

    Callers at process start should treat this as fatal rather than continue
    against a partially migrated schema.
    """

    def __init__(self, identifier: str, error: BaseException):
        self.identifier = identifier
        self.error = error
        super().__init__(f"Migration {identifier} failed: {error}")


@dataclass(frozen=True)
class MigrationStep:
    """A named schema or data transformation.

    ``apply`` receives the connection with a transaction already open and must
    not commit, roll back or call ``executescript``.
    """

    identifier: str
    apply: Callable[[sqlite3.Connection], None] = field(compare=False)
    description: str = ""

    @classmethod
    def from_sql(cls, identifier: str, sql: str, description: str = "") -> MigrationStep:
        """Build a step that runs a multi-statement SQL script."""

        def _run(conn: sqlite3.Connection) -> None:
            execute_script(conn, sql)

        return cls(identifier=identifier, apply=_run, description=description)


def validate_steps(steps: Sequence[MigrationStep]) -> None:
    """Require non-empty, unique and strictly increasing identifiers."""

    previous: str | None = None
    seen: set[str] = set()
    for step in steps:
        ident = step.identifier
        if not ident or not ident.strip():
            raise MigrationOrderError("Migration identifiers must be non-empty strings")
        if ident in seen:
            raise MigrationOrderError(f"Duplicate migration identifier: {ident}")
        if previous is not None and ident <= previous:
            raise MigrationOrderError(
                f"Migration {ident} is listed after {previous}; identifiers must increase"
            )
        seen.add(ident)
        previous = ident


def _check_foreign_keys(conn: sqlite3.Connection) -> None:
    violations = conn.execute("PRAGMA foreign_key_check").fetchall()
    if violations:
        tables = sorted({str(row[0]) for row in violations})
        raise MigrationError(
            f"{len(violations)} foreign key violation(s) in: {', '.join(tables)}"
        )


class MigrationEngine:
    """Apply ordered migration steps to one connection."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        ledger_table: str = LEDGER_TABLE,
        clock: Clock | None = None,
    ) -> None:
        self.conn = conn
        self.ledger = MigrationLedger(conn, table=ledger_table)
        self._clock: Clock = clock or utc_now

    def pending(self, steps: Iterable[MigrationStep]) -> list[str]:
        """Identifiers from ``steps`` that the ledger has not recorded yet."""

        applied = self.ledger.applied_identifiers()
        return [step.identifier for step in steps if step.identifier not in applied]

    def apply(self, steps: Iterable[MigrationStep]) -> list[str]:
        """Run every unapplied step in order and return the identifiers applied.

        Raises :class:`MigrationStepFailed` on the first failing step; steps
        before it stay committed and recorded.
        """

        ordered = list(steps)
        validate_steps(ordered)
        if self.conn.in_transaction:
            raise MigrationError("Migrations cannot run inside an open transaction")

        self.ledger.ensure_table()
        unknown = self.ledger.applied_identifiers() - {step.identifier for step in ordered}
        if unknown:
            log.warning(
                "Database records %d migration(s) unknown to this build: %s",
                len(unknown),
                ", ".join(sorted(unknown)),
            )

        enforce_fk = foreign_keys_enabled(self.conn)
        if enforce_fk:
            self.conn.execute("PRAGMA foreign_keys=OFF")

        applied: list[str] = []
        try:
            for step in ordered:
                if self.ledger.has_applied(step.identifier):
                    log.debug("Migration %s already applied, skipping", step.identifier)
                    continue
                if self._apply_step(step, check_foreign_keys=enforce_fk):
                    applied.append(step.identifier)
        finally:
            if enforce_fk:
                self.conn.execute("PRAGMA foreign_keys=ON")

        if applied:
            log.info("Applied %d migration(s): %s", len(applied), ", ".join(applied))
        return applied

    def _apply_step(self, step: MigrationStep, *, check_foreign_keys: bool) -> bool:
        try:
            with transaction(self.conn):
                # Re-check under the write lock; another writer may have won.
                if self.ledger.has_applied(step.identifier):
                    return False
                step.apply(self.conn)
                if not self.conn.in_transaction:
                    raise MigrationError(
                        f"Migration {step.identifier} ended its transaction early"
                    )
                if check_foreign_keys:
                    _check_foreign_keys(self.conn)
                self.ledger.record_applied(step.identifier, self._clock())
        except Exception as exc:
            log.error("Migration %s failed; rolled back", step.identifier, exc_info=True)
            raise MigrationStepFailed(step.identifier, exc) from exc
        log.info("Migration %s applied%s", step.identifier, _describe(step))
        return True


def _describe(step: MigrationStep) -> str:
    return f": {step.description}" if step.description else ""
