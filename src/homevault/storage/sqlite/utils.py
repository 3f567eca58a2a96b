# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Utility helpers for the SQLite database: connections, pragmas, explicit
transactions and schema introspection.

Connections are opened in autocommit mode (``isolation_level=None``) so the
``sqlite3`` module never begins or commits transactions behind our back;
every write goes through :func:`transaction`.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, cast

__all__ = [
    "DEFAULT_BUSY_TIMEOUT_MS",
    "open_db",
    "set_pragmas",
    "transaction",
    "execute_script",
    "split_statements",
    "table_exists",
    "index_exists",
    "list_tables",
    "foreign_keys_enabled",
]

DEFAULT_BUSY_TIMEOUT_MS = 10_000


# ---- Opening connections ----------------------------------------------------


def _database_uri(path: str, mode: str) -> str:
    # as_uri() percent-encodes "#", "?" and "%", which SQLite would otherwise
    # read as URI syntax and open a different file.
    return f"{Path(path).resolve().as_uri()}?mode={mode}"


def open_db(
    path: str,
    *,
    mode: str = "rwc",
    pragmas: Mapping[str, object] | None = None,
) -> sqlite3.Connection:
    """
    Open the application database (or ``":memory:"``) in autocommit mode.

    mode: "ro" (read-only), "rw", "rwc" (create if needed). Default: "rwc".
    Foreign keys and a busy timeout are always set; ``pragmas`` may add
    ``journal_mode``/``synchronous`` or override the defaults.
    """
    if path == ":memory:":
        conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
    else:
        conn = sqlite3.connect(
            _database_uri(path, mode), uri=True, check_same_thread=False, isolation_level=None
        )
    conn.row_factory = sqlite3.Row
    opts: dict[str, object] = {"foreign_keys": True, "busy_timeout_ms": DEFAULT_BUSY_TIMEOUT_MS}
    opts.update(pragmas or {})
    set_pragmas(conn, opts)
    return conn


# Setting name -> PRAGMA statement. PRAGMA takes no bound parameters.
_PRAGMA_STATEMENTS: dict[str, Callable[[object], str]] = {
    "foreign_keys": lambda on: f"PRAGMA foreign_keys={'ON' if on else 'OFF'}",
    "journal_mode": lambda mode: f"PRAGMA journal_mode={mode}",
    "synchronous": lambda level: f"PRAGMA synchronous={level}",
    "busy_timeout_ms": lambda ms: f"PRAGMA busy_timeout={int(cast(Any, ms))}",
}


def set_pragmas(conn: sqlite3.Connection, opts: Mapping[str, object]) -> None:
    """Apply connection settings; names are case-insensitive.

    Known names: ``foreign_keys``, ``journal_mode``, ``synchronous`` and
    ``busy_timeout_ms``. Anything else raises ``ValueError``.
    """

    for key, value in opts.items():
        statement = _PRAGMA_STATEMENTS.get(str(key).lower())
        if statement is None:
            raise ValueError(f"Unsupported connection setting: {key!r}")
        conn.execute(statement(value))


def foreign_keys_enabled(conn: sqlite3.Connection) -> bool:
    row = conn.execute("PRAGMA foreign_keys").fetchone()
    return bool(row and row[0])


# ---- Transactions -----------------------------------------------------------


@contextmanager
def transaction(
    conn: sqlite3.Connection,
    *,
    begin: str = "BEGIN IMMEDIATE",
) -> Iterator[sqlite3.Connection]:
    """
    Transaction wrapper that commits on success and rolls back on error.
    Uses BEGIN IMMEDIATE by default to reduce write contention.
    """

    conn.execute(begin)
    try:
        yield conn
        conn.execute("COMMIT")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise


# ---- Multi-statement scripts ------------------------------------------------


def split_statements(script: str) -> list[str]:
    """Split ``script`` into complete SQL statements.

    Pieces are accumulated until :func:`sqlite3.complete_statement` accepts
    them, so semicolons inside string literals or trigger bodies stay intact.
    """

    statements: list[str] = []
    buffer = ""
    for piece in script.split(";"):
        buffer += piece + ";"
        if sqlite3.complete_statement(buffer):
            statement = buffer.strip()
            if statement.strip(";").strip():
                statements.append(statement)
            buffer = ""
    if buffer.strip(";").strip():
        statements.append(buffer.strip())
    return statements


def execute_script(conn: sqlite3.Connection, script: str) -> None:
    """Run a multi-statement script inside the caller's transaction.

    ``Connection.executescript`` commits any open transaction first, which
    would break step atomicity; this runs one statement at a time instead.
    """

    for statement in split_statements(script):
        conn.execute(statement)


# ---- Schema introspection ---------------------------------------------------


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?",
        (name,),
    ).fetchone()
    return bool(row and row[0])


def index_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type='index' AND name=?",
        (name,),
    ).fetchone()
    return bool(row and row[0])


def list_tables(conn: sqlite3.Connection) -> list[str]:
    """Return user table names (SQLite internal tables excluded)."""

    rows = conn.execute(
        """
        SELECT name FROM sqlite_master
         WHERE type='table' AND name NOT LIKE 'sqlite_%'
         ORDER BY name
        """
    ).fetchall()
    return [str(row[0]) for row in rows]
