# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Serialized SQLite writer.

One worker thread owns the write side of the database. Callers hand it
callables taking the connection; they run strictly one after another, so two
threads can never interleave transactions on the shared connection and
contention never surfaces as ``database is locked``.

Usage:
    writer = DbWriter(db_path)
    writer.run(lambda conn: conn.execute("INSERT ..."))
    writer.barrier()  # everything queued so far has finished
    writer.close()
"""

from __future__ import annotations

import logging
import queue
import sqlite3
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Callable, Optional

from .utils import open_db

log = logging.getLogger(__name__)

__all__ = ["DbWriter", "WriterClosed"]

WriteJob = Callable[[sqlite3.Connection], Any]

# Queued after the last job by close(); the worker exits when it sees it.
_SHUTDOWN = None


class WriterClosed(RuntimeError):
    """Raised when work is submitted to a closed writer."""


class DbWriter:
    """Run connection callables one at a time on a dedicated thread.

    Pass ``db_path`` to let the writer open (and later close) its own
    connection, or ``connection`` to serialize work on one the caller keeps.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        pragmas: dict[str, Any] | None = None,
        connection: sqlite3.Connection | None = None,
    ) -> None:
        if connection is None and db_path is None:
            raise ValueError("DbWriter needs a db_path or an existing connection")

        self.db_path = Path(db_path) if db_path is not None else None
        self._owns_conn = connection is None
        if connection is None:
            assert self.db_path is not None
            connection = open_db(self.db_path.as_posix(), pragmas=pragmas)
        self.conn = connection

        self._jobs: "queue.Queue[Optional[tuple[Future, WriteJob]]]" = queue.Queue()
        self._state_lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._drain, name="homevault-db-writer", daemon=True)
        self._thread.start()
        log.debug("DB writer started for %s", self.db_path or "<borrowed connection>")

    # ---- Submitting work ------------------------------------------------------

    def submit(self, func: WriteJob) -> Future:
        """Queue ``func`` and return a future for its result."""

        future: Future = Future()
        with self._state_lock:
            if self._closed:
                future.set_exception(WriterClosed("Writer is closed"))
                return future
            self._jobs.put((future, func))
        return future

    def run(self, func: WriteJob) -> Any:
        """Run ``func`` on the writer thread and return its result.

        Called from the writer thread itself (a job that needs another write)
        it runs inline instead of waiting on its own queue.
        """

        if threading.current_thread() is self._thread:
            return func(self.conn)
        if self._closed:
            raise WriterClosed("Writer is closed")
        return self.submit(func).result()

    def barrier(self) -> None:
        """Block until every job queued before this call has finished."""

        self.run(lambda _conn: None)

    @property
    def pending(self) -> int:
        """Approximate number of jobs waiting to run."""

        return self._jobs.qsize()

    @property
    def closed(self) -> bool:
        return self._closed

    # ---- Shutdown -------------------------------------------------------------

    def close(self) -> None:
        """Finish queued jobs, stop the thread and close an owned connection."""

        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._jobs.put(_SHUTDOWN)

        self._thread.join(timeout=5)
        if self._thread.is_alive():
            log.warning("DB writer thread did not stop within 5s")
        if self._owns_conn:
            self.conn.close()
        log.debug("DB writer stopped")

    def __enter__(self) -> DbWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- Worker ---------------------------------------------------------------

    def _drain(self) -> None:
        while True:
            item = self._jobs.get()
            if item is _SHUTDOWN:
                return
            future, func = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = func(self.conn)
            except Exception as exc:
                log.debug("DB writer job failed: %s", exc)
                future.set_exception(exc)
            else:
                future.set_result(result)
