# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Public package interface for the HomeVault storage core."""

from importlib import import_module

from homevault.blobs import BlobStore, StoreResult, StorageStats
from homevault.config import StorageSettings
from homevault.storage import (
    ALL_STEPS,
    Database,
    MigrationEngine,
    MigrationStep,
    MigrationStepFailed,
    open_database,
    reset_all,
)

__version__ = "0.3.0"

_LAZY_EXPORTS = {
    "AppServices": ("homevault.app", "AppServices"),
    "bootstrap": ("homevault.app", "bootstrap"),
    "setup_logging": ("homevault.core.logging_config", "setup_logging"),
}


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        module_name, attr = _LAZY_EXPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'homevault' has no attribute {name!r}")


__all__ = [
    "ALL_STEPS",
    "AppServices",
    "BlobStore",
    "Database",
    "MigrationEngine",
    "MigrationStep",
    "MigrationStepFailed",
    "StorageSettings",
    "StorageStats",
    "StoreResult",
    "bootstrap",
    "open_database",
    "reset_all",
    "setup_logging",
    "__version__",
]
