# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
"Erase all data" for the application database.

Rows are removed with ``DELETE`` statements in one transaction, children
before parents, then auto-increment counters are reset and the file is
vacuumed. The database file itself is never deleted: removing a live SQLite
file under an open connection corrupts that connection.

The migration ledger is preserved by default, so the emptied database keeps
its migrated structure and history. Blob files are not touched.
"""

from __future__ import annotations

import logging
import sqlite3

from .ledger import LEDGER_TABLE, MigrationLedger
from .sqlite.utils import list_tables, table_exists, transaction

log = logging.getLogger(__name__)

__all__ = ["reset_all", "deletion_order"]


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _parents(conn: sqlite3.Connection, table: str) -> set[str]:
    rows = conn.execute(f"PRAGMA foreign_key_list({_quote(table)})").fetchall()
    # column 2 is the referenced (parent) table
    return {str(row[2]) for row in rows if str(row[2]) != table}


def deletion_order(conn: sqlite3.Connection, tables: list[str]) -> list[str]:
    """Order ``tables`` so every table precedes the tables it references.

    Tables caught in a reference cycle are appended in name order; the reset
    defers foreign key checks to commit time so they still clear cleanly.
    """

    remaining = set(tables)
    parents = {name: _parents(conn, name) & remaining for name in tables}
    children: dict[str, set[str]] = {name: set() for name in tables}
    for child, refs in parents.items():
        for parent in refs:
            children[parent].add(child)

    ordered: list[str] = []
    while remaining:
        # A table is ready once nothing left still references it.
        ready = sorted(name for name in remaining if not (children[name] & remaining))
        if not ready:
            log.warning("Foreign key cycle among %s", ", ".join(sorted(remaining)))
            ordered.extend(sorted(remaining))
            break
        ordered.extend(ready)
        remaining.difference_update(ready)
    return ordered


def reset_all(
    conn: sqlite3.Connection,
    *,
    ledger_table: str = LEDGER_TABLE,
    clear_ledger: bool = False,
    vacuum: bool = True,
) -> dict[str, int]:
    """Delete every application row and return ``{table: rows_deleted}``.

    Pass ``clear_ledger=True`` to also forget applied migrations; the next
    startup then re-runs every step against the existing (empty) schema.
    """

    if conn.in_transaction:
        raise RuntimeError("reset_all cannot run inside an open transaction")

    tables = [name for name in list_tables(conn) if name != ledger_table]
    order = deletion_order(conn, tables)
    deleted: dict[str, int] = {}

    with transaction(conn):
        conn.execute("PRAGMA defer_foreign_keys=ON")
        for name in order:
            cur = conn.execute(f"DELETE FROM {_quote(name)}")
            deleted[name] = int(cur.rowcount or 0)
        ledger = MigrationLedger(conn, table=ledger_table)
        if clear_ledger and ledger.exists():
            deleted[ledger_table] = ledger.clear()
        if table_exists(conn, "sqlite_sequence"):
            conn.execute("DELETE FROM sqlite_sequence")

    if vacuum:
        conn.execute("VACUUM")

    total = sum(deleted.values())
    log.info(
        "All data reset: %d row(s) across %d table(s)%s",
        total,
        len(order),
        " (ledger cleared)" if clear_ledger else "",
    )
    for name, count in deleted.items():
        if count:
            log.info("  %s: %d row(s) deleted", name, count)
    return deleted
