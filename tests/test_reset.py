import logging

import pytest

from homevault.storage.ledger import MigrationLedger
from homevault.storage.migrations import MigrationEngine
from homevault.storage.reset import deletion_order, reset_all
from homevault.storage.schema import ALL_STEPS, APPLICATION_TABLES
from homevault.storage.sqlite.utils import open_db, transaction


def _populated():
    conn = open_db(":memory:")
    MigrationEngine(conn).apply(ALL_STEPS)
    with transaction(conn):
        conn.execute("INSERT INTO homes (name) VALUES ('Main')")
        conn.execute("INSERT INTO categories (home_id, name) VALUES (1, 'HVAC')")
        conn.execute("INSERT INTO locations (home_id, name) VALUES (1, 'Basement')")
        conn.execute(
            "INSERT INTO assets (home_id, category_id, location_id, name) VALUES (1, 1, 1, 'Furnace')"
        )
        conn.execute("INSERT INTO service_providers (home_id, company) VALUES (1, 'Acme')")
        conn.execute(
            "INSERT INTO maintenance_records (asset_id, service_provider_id, date, type) "
            "VALUES (1, 1, '2025-01-01', 'service')"
        )
        conn.execute("INSERT INTO tasks (asset_id, title) VALUES (1, 'Replace filter')")
        conn.execute(
            "INSERT INTO attachments (asset_id, maintenance_record_id, type, filename, relative_path) "
            "VALUES (1, 1, 'photo', 'a.jpg', '2025/01/abc.jpg')"
        )
    return conn


def _count(conn, table):
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def test_children_are_deleted_before_parents():
    conn = _populated()
    order = deletion_order(conn, list(APPLICATION_TABLES))
    assert order.index("attachments") < order.index("maintenance_records")
    assert order.index("maintenance_records") < order.index("assets")
    assert order.index("maintenance_records") < order.index("service_providers")
    assert order.index("assets") < order.index("categories")
    assert order.index("categories") < order.index("homes")
    assert order[-1] == "homes"


def test_reset_empties_every_table_and_keeps_ledger():
    conn = _populated()
    deleted = reset_all(conn)

    for table in APPLICATION_TABLES:
        assert _count(conn, table) == 0
    assert deleted["homes"] == 1
    assert deleted["attachments"] == 1
    assert "schema_migrations" not in deleted
    assert len(MigrationLedger(conn).applied()) == len(ALL_STEPS)


def test_reset_restarts_autoincrement():
    conn = _populated()
    reset_all(conn)
    conn.execute("INSERT INTO homes (name) VALUES ('Fresh')")
    assert conn.execute("SELECT id FROM homes").fetchone()[0] == 1


def test_reset_can_clear_ledger():
    conn = _populated()
    deleted = reset_all(conn, clear_ledger=True)
    assert deleted["schema_migrations"] == len(ALL_STEPS)
    assert MigrationLedger(conn).applied() == []
    # schema survives; migrations re-run as no-ops
    assert MigrationEngine(conn).apply(ALL_STEPS) == [step.identifier for step in ALL_STEPS]


def test_reset_on_empty_database():
    conn = open_db(":memory:")
    MigrationEngine(conn).apply(ALL_STEPS)
    deleted = reset_all(conn, vacuum=False)
    assert set(deleted.values()) == {0}


def test_reset_refuses_open_transaction():
    conn = _populated()
    conn.execute("BEGIN")
    with pytest.raises(RuntimeError):
        reset_all(conn)
    conn.execute("ROLLBACK")
    assert _count(conn, "homes") == 1


def test_reset_then_reopen_keeps_schema(tmp_path):
    path = tmp_path / "homemaint.db"
    conn = open_db(path.as_posix())
    MigrationEngine(conn).apply(ALL_STEPS)
    conn.execute("INSERT INTO homes (name) VALUES ('Main')")
    reset_all(conn)
    conn.close()

    conn = open_db(path.as_posix())
    assert MigrationEngine(conn).apply(ALL_STEPS) == []
    assert _count(conn, "homes") == 0
    conn.close()


def test_reset_logs_row_counts_per_table(caplog):
    conn = _populated()
    with caplog.at_level(logging.INFO, logger="homevault.storage.reset"):
        reset_all(conn, vacuum=False)
    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert "  homes: 1 row(s) deleted" in messages
    assert "  attachments: 1 row(s) deleted" in messages
