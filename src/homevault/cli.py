# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
HomeVault storage command-line tool.

Usage:
    homevault migrate DB
    homevault status DB
    homevault reset DB --yes [--clear-ledger]
    homevault check DB
    homevault optimize DB
    homevault store ROOT FILE [--mime TYPE] [--image]
    homevault stats ROOT

Structured results are printed as JSON. Exit status is 1 for expected
failures (missing files, rejected payloads, failed integrity check) and 2
when a migration step fails.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from PIL import Image

from homevault.blobs.errors import BlobStoreError
from homevault.blobs.store import BlobStore
from homevault.config import StorageSettings
from homevault.core.units import format_bytes
from homevault.storage.database import DatabaseError, open_database
from homevault.storage.ledger import MigrationLedger
from homevault.storage.maintenance import integrity_report
from homevault.storage.migrations import MigrationEngine, MigrationError, MigrationStepFailed
from homevault.storage.schema import ALL_STEPS
from homevault.storage.sqlite.utils import open_db

log = logging.getLogger(__name__)


class CommandError(Exception):
    """Expected failure reported to the user without a traceback."""


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2))


def _existing_database(path: str) -> Path:
    db_path = Path(path)
    if not db_path.is_file():
        raise CommandError(f"Database not found: {db_path}")
    return db_path


def _blob_store(root: str) -> BlobStore:
    root_path = Path(root)
    settings = StorageSettings.from_env(data_dir=root_path.parent, blob_dir_name=root_path.name)
    return BlobStore.from_settings(settings)


def cmd_migrate(args: argparse.Namespace) -> int:
    with open_database(args.db) as db:
        _print_json(
            {
                "database": db.path,
                "applied": db.migrated,
                "ledger": [entry.model_dump(mode="json") for entry in db.applied_migrations()],
            }
        )
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    db_path = _existing_database(args.db)
    conn = open_db(db_path.as_posix(), mode="rw")
    try:
        ledger = MigrationLedger(conn)
        applied = [entry.model_dump(mode="json") for entry in ledger.applied()]
        pending = MigrationEngine(conn).pending(ALL_STEPS)
    finally:
        conn.close()
    _print_json({"database": str(db_path), "applied": applied, "pending": pending})
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    if not args.yes:
        raise CommandError("Refusing to erase all data without --yes")
    _existing_database(args.db)
    with open_database(args.db) as db:
        deleted = db.reset_all(clear_ledger=args.clear_ledger)
    _print_json({"database": args.db, "deleted": deleted})
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    _existing_database(args.db)
    with open_database(args.db) as db:
        report = integrity_report(db.conn)
    healthy = report == ["ok"]
    _print_json({"database": args.db, "ok": healthy, "report": report})
    return 0 if healthy else 1


def cmd_optimize(args: argparse.Namespace) -> int:
    db_path = _existing_database(args.db)
    before = db_path.stat().st_size
    with open_database(args.db) as db:
        db.optimize()
    after = db_path.stat().st_size
    print(f"Optimized {db_path}: {format_bytes(before)} -> {format_bytes(after)}")
    return 0


def cmd_store(args: argparse.Namespace) -> int:
    source = Path(args.file)
    if not source.is_file():
        raise CommandError(f"File not found: {source}")
    store = _blob_store(args.root)

    if args.image:
        try:
            with Image.open(source) as image:
                image.load()
                result = store.store_image(image, source.name)
        except OSError as exc:
            raise CommandError(f"Not a readable image: {source}") from exc
    else:
        result = store.store(source.read_bytes(), mime_type=args.mime, filename=source.name)

    _print_json(result.model_dump(mode="json"))
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    store = _blob_store(args.root)
    stats = store.stats()
    payload = stats.model_dump(mode="json")
    payload["total_human"] = format_bytes(stats.total_bytes)
    _print_json(payload)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("homevault", description="HomeVault storage tool")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("migrate", help="Create or upgrade a database")
    sp.add_argument("db")
    sp.set_defaults(func=cmd_migrate)

    sp = sub.add_parser("status", help="Show applied and pending migrations")
    sp.add_argument("db")
    sp.set_defaults(func=cmd_status)

    sp = sub.add_parser("reset", help="Erase all application data")
    sp.add_argument("db")
    sp.add_argument("--yes", action="store_true", help="Confirm the reset")
    sp.add_argument(
        "--clear-ledger",
        action="store_true",
        help="Also forget applied migrations",
    )
    sp.set_defaults(func=cmd_reset)

    sp = sub.add_parser("check", help="Run PRAGMA integrity_check")
    sp.add_argument("db")
    sp.set_defaults(func=cmd_check)

    sp = sub.add_parser("optimize", help="ANALYZE and VACUUM")
    sp.add_argument("db")
    sp.set_defaults(func=cmd_optimize)

    sp = sub.add_parser("store", help="Store a file in a blob root")
    sp.add_argument("root")
    sp.add_argument("file")
    sp.add_argument("--mime", default=None)
    sp.add_argument("--image", action="store_true", help="Re-encode as JPEG first")
    sp.set_defaults(func=cmd_store)

    sp = sub.add_parser("stats", help="Count stored blobs and bytes")
    sp.add_argument("root")
    sp.set_defaults(func=cmd_stats)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")

    try:
        return args.func(args)
    except MigrationStepFailed as exc:
        log.critical("Database migration failed, cannot continue: %s", exc)
        return 2
    except (CommandError, BlobStoreError, MigrationError, DatabaseError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
