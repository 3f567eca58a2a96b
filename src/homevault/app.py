# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Process start-up: settings, logging, database and blob store in one call."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from homevault.blobs.store import BlobStore
from homevault.config import StorageSettings
from homevault.core.clock import Clock
from homevault.core.logging_config import setup_logging
from homevault.storage.database import Database, open_database
from homevault.storage.migrations import MigrationStep
from homevault.storage.schema import ALL_STEPS

log = logging.getLogger(__name__)

__all__ = ["AppServices", "bootstrap"]


@dataclass
class AppServices:
    settings: StorageSettings
    database: Database
    blobs: BlobStore

    def close(self) -> None:
        self.database.close()

    def __enter__(self) -> AppServices:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def bootstrap(
    settings: StorageSettings | None = None,
    *,
    steps: Iterable[MigrationStep] = ALL_STEPS,
    configure_logging: bool = False,
    clock: Clock | None = None,
    use_writer: bool = False,
) -> AppServices:
    """Open the database, run migrations and construct the blob store.

    Must finish before any other database access. A failing migration
    propagates as :class:`~homevault.storage.migrations.MigrationStepFailed`
    and nothing is left open.
    """

    settings = settings or StorageSettings.from_env()
    if configure_logging:
        setup_logging()

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    database = open_database(settings.database_path, steps=steps, use_writer=use_writer)
    try:
        blobs = BlobStore.from_settings(settings, clock=clock)
    except Exception:
        database.close()
        raise

    log.info("HomeVault ready (data dir: %s)", settings.data_dir)
    return AppServices(settings=settings, database=database, blobs=blobs)
