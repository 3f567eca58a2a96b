import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from homevault.storage.ledger import MigrationLedger
from homevault.storage.sqlite.utils import open_db


def _conn():
    return open_db(":memory:")


def test_ledger_table_is_created_idempotently():
    conn = _conn()
    ledger = MigrationLedger(conn)
    assert not ledger.exists()
    ledger.ensure_table()
    ledger.ensure_table()
    assert ledger.exists()
    assert ledger.applied() == []


def test_applied_is_empty_without_table():
    ledger = MigrationLedger(_conn())
    assert ledger.applied() == []
    assert ledger.applied_identifiers() == set()


def test_record_and_read_back_in_order():
    conn = _conn()
    ledger = MigrationLedger(conn)
    ledger.ensure_table()
    at = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    ledger.record_applied("002_b", at)
    ledger.record_applied("001_a", at)

    entries = ledger.applied()
    assert [entry.identifier for entry in entries] == ["001_a", "002_b"]
    assert entries[0].applied_at == "2025-01-02T03:04:05+00:00"
    assert ledger.has_applied("001_a")
    assert not ledger.has_applied("003_c")


def test_timestamps_are_stored_in_utc():
    conn = _conn()
    ledger = MigrationLedger(conn)
    ledger.ensure_table()
    plus_two = timezone(timedelta(hours=2))
    ledger.record_applied("001_a", datetime(2025, 1, 2, 12, 0, tzinfo=plus_two))
    assert ledger.applied()[0].applied_at == "2025-01-02T10:00:00+00:00"


def test_recording_twice_fails():
    conn = _conn()
    ledger = MigrationLedger(conn)
    ledger.ensure_table()
    ledger.record_applied("001_a", datetime(2025, 1, 1))
    with pytest.raises(sqlite3.IntegrityError):
        ledger.record_applied("001_a", datetime(2025, 1, 1))


def test_clear_removes_entries():
    conn = _conn()
    ledger = MigrationLedger(conn)
    ledger.ensure_table()
    ledger.record_applied("001_a", datetime(2025, 1, 1))
    ledger.record_applied("002_b", datetime(2025, 1, 1))
    assert ledger.clear() == 2
    assert ledger.applied() == []


def test_table_name_must_be_identifier():
    with pytest.raises(ValueError):
        MigrationLedger(_conn(), table="bad name; DROP TABLE x")
