# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Human readable size formatting for log lines and CLI output."""

from __future__ import annotations

__all__ = ["format_bytes"]

_UNITS = ("KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """Return ``size`` as ``"512 B"``, ``"1.5 KB"``, ``"50.0 MB"`` and so on."""

    value = float(size)
    if abs(value) < 1024:
        return f"{int(size)} B"
    for unit in _UNITS:
        value /= 1024.0
        if abs(value) < 1024 or unit == _UNITS[-1]:
            return f"{value:.1f} {unit}"
    return f"{value:.1f} {_UNITS[-1]}"
