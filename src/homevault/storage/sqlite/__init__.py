# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""SQLite connection, transaction and single-writer helpers."""

from homevault.storage.sqlite.db_writer import DbWriter, WriterClosed
from homevault.storage.sqlite.utils import execute_script, open_db, transaction

__all__ = ["DbWriter", "WriterClosed", "execute_script", "open_db", "transaction"]
