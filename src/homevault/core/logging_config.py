# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Production logging configuration with file rotation."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "homevault"
_HANDLER_PREFIX = "homevault."


def setup_logging(
    app_name: str = "HomeVault",
    console_level: int = logging.INFO,
    log_dir: Path | None = None,
) -> Path:
    """
    Configure logging with file rotation.

    Creates two log files:
    - homevault.log: all DEBUG+ package messages (10 MB per file, 5 rotations)
    - errors.log: ERROR+ messages from any logger (5 MB per file, 3 rotations)

    Args:
        app_name: Application name for the platform log directory
        console_level: Minimum level for console output
        log_dir: Explicit log directory (overrides the platform default)

    Returns:
        Path to the log directory
    """
    log_dir = Path(log_dir) if log_dir is not None else _get_log_directory(app_name)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    _close_handlers(root_logger)

    detailed_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(logging.DEBUG)
    _close_handlers(pkg_logger)

    pkg_logger.addHandler(
        _rotating_handler(log_dir / "homevault.log", "app", logging.DEBUG, 10, 5, detailed_formatter)
    )
    root_logger.addHandler(
        _rotating_handler(log_dir / "errors.log", "errors", logging.ERROR, 5, 3, detailed_formatter)
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(simple_formatter)
    console_handler.set_name("homevault.console")
    pkg_logger.addHandler(console_handler)

    # SQLite helpers log at INFO and above only
    logging.getLogger("homevault.storage.sqlite").setLevel(logging.INFO)

    logging.getLogger(__name__).info(
        "%s logging initialized in %s (Python %s on %s)",
        app_name,
        log_dir,
        sys.version.split()[0],
        sys.platform,
    )

    return log_dir


def _rotating_handler(
    path: Path,
    name: str,
    level: int,
    max_mb: int,
    backups: int,
    formatter: logging.Formatter,
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path, maxBytes=max_mb * 1024 * 1024, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.set_name(_HANDLER_PREFIX + name)
    return handler


def _close_handlers(logger: logging.Logger) -> None:
    """Drop handlers installed by a previous call; foreign handlers stay."""

    for handler in list(logger.handlers):
        if (handler.get_name() or "").startswith(_HANDLER_PREFIX):
            logger.removeHandler(handler)
            handler.close()


def _get_log_directory(app_name: str) -> Path:
    """
    Get platform-specific log directory.

    - Windows: %LOCALAPPDATA%\\AppName\\logs
    - macOS: ~/Library/Logs/AppName
    - Linux: ~/.local/share/AppName/logs
    """
    home = Path.home()

    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
        return base / app_name / "logs"

    elif sys.platform == "darwin":
        return home / "Library" / "Logs" / app_name

    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", home / ".local" / "share")
        return Path(xdg_data_home) / app_name / "logs"


def get_log_directory(app_name: str = "HomeVault") -> Path:
    """
    Get the log directory path without setting up logging.

    Useful for displaying log location to users or opening log folder.
    """
    return _get_log_directory(app_name)
