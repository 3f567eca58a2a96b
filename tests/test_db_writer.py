import threading

import pytest

from homevault.storage.sqlite.db_writer import DbWriter, WriterClosed
from homevault.storage.sqlite.utils import open_db, transaction


def _setup(path):
    conn = open_db(path.as_posix())
    conn.execute("CREATE TABLE counter (id INTEGER PRIMARY KEY, n INTEGER)")
    conn.execute("INSERT INTO counter (id, n) VALUES (1, 0)")
    conn.close()


def _increment(conn):
    with transaction(conn):
        current = conn.execute("SELECT n FROM counter WHERE id = 1").fetchone()[0]
        conn.execute("UPDATE counter SET n = ? WHERE id = 1", (current + 1,))
    return current + 1


def test_run_returns_result(tmp_path):
    path = tmp_path / "w.db"
    _setup(path)
    with DbWriter(path) as writer:
        assert writer.run(_increment) == 1


def test_concurrent_submissions_are_serialized(tmp_path):
    path = tmp_path / "w.db"
    _setup(path)
    writer = DbWriter(path)

    def _worker():
        for _ in range(25):
            writer.run(_increment)

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    writer.barrier()

    assert writer.run(lambda conn: conn.execute("SELECT n FROM counter").fetchone()[0]) == 100
    writer.close()


def test_exceptions_reach_the_caller(tmp_path):
    path = tmp_path / "w.db"
    _setup(path)
    with DbWriter(path) as writer:
        with pytest.raises(ZeroDivisionError):
            writer.run(lambda conn: 1 / 0)
        assert writer.run(_increment) == 1


def test_closed_writer_rejects_work(tmp_path):
    path = tmp_path / "w.db"
    _setup(path)
    writer = DbWriter(path)
    writer.close()
    assert writer.closed
    with pytest.raises(WriterClosed):
        writer.run(_increment)
    with pytest.raises(WriterClosed):
        writer.submit(_increment).result()


def test_borrowed_connection_stays_open(tmp_path):
    conn = open_db((tmp_path / "w.db").as_posix())
    writer = DbWriter(connection=conn)
    writer.run(lambda c: c.execute("CREATE TABLE t (id INTEGER)"))
    writer.close()
    assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0
    conn.close()


def test_requires_path_or_connection():
    with pytest.raises(ValueError):
        DbWriter()


def test_job_may_call_run_reentrantly(tmp_path):
    path = tmp_path / "w.db"
    _setup(path)
    with DbWriter(path) as writer:
        assert writer.run(lambda conn: writer.run(_increment) + 10) == 11
        writer.barrier()
        assert writer.pending == 0
