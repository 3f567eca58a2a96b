# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Application schema as an ordered list of migration steps.

New releases append steps to ``ALL_STEPS``; existing steps are never edited
once shipped.
"""

from __future__ import annotations

import logging
import sqlite3

from .migrations import MigrationStep
from .sqlite.utils import execute_script, table_exists

log = logging.getLogger(__name__)

__all__ = [
    "ALL_STEPS",
    "APPLICATION_TABLES",
    "UNKNOWN_COMPANY",
    "initial_schema",
    "add_indexes",
    "swap_provider_name_company",
]

APPLICATION_TABLES = (
    "homes",
    "categories",
    "locations",
    "assets",
    "maintenance_records",
    "tasks",
    "service_providers",
    "attachments",
)

# Placeholder for providers that had neither company nor name before 003.
UNKNOWN_COMPANY = "Unknown Company"

_INITIAL_SCHEMA = """
CREATE TABLE IF NOT EXISTS homes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    address TEXT,
    purchase_date TEXT,
    square_footage INTEGER,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    home_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    icon TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (home_id) REFERENCES homes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    home_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    floor TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (home_id) REFERENCES homes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS assets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    home_id INTEGER NOT NULL,
    category_id INTEGER,
    location_id INTEGER,
    name TEXT NOT NULL,
    manufacturer TEXT,
    model_number TEXT,
    serial_number TEXT,
    purchase_date TEXT,
    installation_date TEXT,
    warranty_expiration TEXT,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (home_id) REFERENCES homes(id) ON DELETE CASCADE,
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL,
    FOREIGN KEY (location_id) REFERENCES locations(id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS maintenance_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    asset_id INTEGER NOT NULL,
    service_provider_id INTEGER,
    date TEXT NOT NULL,
    type TEXT NOT NULL,
    description TEXT,
    cost TEXT,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (asset_id) REFERENCES assets(id) ON DELETE CASCADE,
    FOREIGN KEY (service_provider_id) REFERENCES service_providers(id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    asset_id INTEGER,
    title TEXT NOT NULL,
    description TEXT,
    due_date TEXT,
    priority TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    completed_at TEXT,
    FOREIGN KEY (asset_id) REFERENCES assets(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS service_providers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    home_id INTEGER NOT NULL,
    company TEXT NOT NULL,
    name TEXT,
    phone TEXT,
    email TEXT,
    specialty TEXT,
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (home_id) REFERENCES homes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    asset_id INTEGER,
    maintenance_record_id INTEGER,
    type TEXT NOT NULL,
    filename TEXT NOT NULL,
    relative_path TEXT NOT NULL,
    file_size INTEGER,
    mime_type TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (asset_id) REFERENCES assets(id) ON DELETE CASCADE,
    FOREIGN KEY (maintenance_record_id) REFERENCES maintenance_records(id) ON DELETE CASCADE
);
"""

_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_assets_home_id ON assets(home_id);
CREATE INDEX IF NOT EXISTS idx_assets_category_id ON assets(category_id);
CREATE INDEX IF NOT EXISTS idx_assets_location_id ON assets(location_id);
CREATE INDEX IF NOT EXISTS idx_maintenance_records_asset_id ON maintenance_records(asset_id);
CREATE INDEX IF NOT EXISTS idx_tasks_asset_id ON tasks(asset_id);
CREATE INDEX IF NOT EXISTS idx_attachments_asset_id ON attachments(asset_id);
"""


def initial_schema(conn: sqlite3.Connection) -> None:
    execute_script(conn, _INITIAL_SCHEMA)


def add_indexes(conn: sqlite3.Connection) -> None:
    execute_script(conn, _INDEXES)


def swap_provider_name_company(conn: sqlite3.Connection) -> None:
    """Rebuild ``service_providers`` with ``company`` required and ``name`` optional.

    Rows without a company keep their name as the company and lose the
    contact name; rows with neither get ``UNKNOWN_COMPANY``.
    """

    if not table_exists(conn, "service_providers"):
        log.info("service_providers table doesn't exist yet, skipping rebuild")
        return

    execute_script(
        conn,
        """
        DROP TABLE IF EXISTS service_providers_new;

        CREATE TABLE service_providers_new (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            home_id INTEGER NOT NULL,
            company TEXT NOT NULL,
            name TEXT,
            phone TEXT,
            email TEXT,
            specialty TEXT,
            notes TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (home_id) REFERENCES homes(id) ON DELETE CASCADE
        );
        """,
    )
    conn.execute(
        """
        INSERT INTO service_providers_new (
            id, home_id, company, name, phone, email, specialty, notes, created_at
        )
        SELECT id, home_id,
               COALESCE(company, name, ?) AS company,
               CASE WHEN company IS NOT NULL THEN name ELSE NULL END AS name,
               phone, email, specialty, notes, created_at
          FROM service_providers
        """,
        (UNKNOWN_COMPANY,),
    )
    conn.execute("DROP TABLE service_providers")
    conn.execute("ALTER TABLE service_providers_new RENAME TO service_providers")


ALL_STEPS: tuple[MigrationStep, ...] = (
    MigrationStep("001_initial_schema", initial_schema, "create initial schema"),
    MigrationStep("002_add_indexes", add_indexes, "add performance indexes"),
    MigrationStep(
        "003_swap_provider_name_company",
        swap_provider_name_company,
        "company is now the required provider field",
    ),
)
