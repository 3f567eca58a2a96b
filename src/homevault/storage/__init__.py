# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Embedded database: migrations, ledger, destructive reset."""

from homevault.storage.database import Database, open_database
from homevault.storage.ledger import LEDGER_TABLE, LedgerEntry, MigrationLedger
from homevault.storage.migrations import (
    MigrationEngine,
    MigrationError,
    MigrationOrderError,
    MigrationStep,
    MigrationStepFailed,
)
from homevault.storage.reset import reset_all
from homevault.storage.schema import ALL_STEPS

__all__ = [
    "ALL_STEPS",
    "Database",
    "LEDGER_TABLE",
    "LedgerEntry",
    "MigrationEngine",
    "MigrationError",
    "MigrationLedger",
    "MigrationOrderError",
    "MigrationStep",
    "MigrationStepFailed",
    "open_database",
    "reset_all",
]
