# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Injectable time sources."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

__all__ = ["Clock", "local_now", "utc_now", "fixed_clock", "isoformat_utc"]

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Wall-clock time in the local zone; blob paths shard on this."""

    return datetime.now().astimezone()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock that always reports ``moment``."""

    def _clock() -> datetime:
        return moment

    return _clock


def isoformat_utc(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="seconds")
