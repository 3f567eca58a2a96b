# HomeVault
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Feature flags read from the ``HV_FEATURES`` environment variable.

The value is a comma separated list. ``name`` or ``name=on`` switches a flag
on; ``!name``, ``-name`` or ``name=off`` switches it off. Names are case
insensitive and dashes count as underscores. Unknown names and unreadable
values are logged and ignored.

The parsed map is cached; call :func:`reload` after changing the variable.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

log = logging.getLogger(__name__)

__all__ = ["ENV_VAR", "KNOWN_FLAGS", "all_enabled", "is_enabled", "parse_flags", "reload"]

ENV_VAR = "HV_FEATURES"

KNOWN_FLAGS: dict[str, str] = {
    "verify_dedup": "compare stored bytes before reporting a deduplication hit",
}

_SWITCHES = {
    "1": True, "true": True, "on": True, "yes": True,
    "0": False, "false": False, "off": False, "no": False,
}


def _flag_name(raw: str) -> str:
    return raw.strip().lower().replace("-", "_")


def parse_flags(raw: str) -> dict[str, bool]:
    """Parse an ``HV_FEATURES`` value into ``{flag: enabled}``; later entries win."""

    parsed: dict[str, bool] = {}
    for entry in filter(None, (part.strip() for part in raw.split(","))):
        name, sep, value = entry.partition("=")
        if entry[0] in "!-":
            name, state = entry[1:], False
        elif sep:
            state = _SWITCHES.get(value.strip().lower())
            if state is None:
                log.warning("Ignoring %s entry %r: unreadable value", ENV_VAR, entry)
                continue
        else:
            state = True
        key = _flag_name(name)
        if key not in KNOWN_FLAGS:
            log.warning("Ignoring unknown feature flag %r in %s", key, ENV_VAR)
            continue
        parsed[key] = state
    return parsed


@lru_cache(maxsize=1)
def _current() -> dict[str, bool]:
    return parse_flags(os.environ.get(ENV_VAR, ""))


def reload() -> None:
    """Forget the cached flags so the next lookup re-reads the environment."""

    _current.cache_clear()


def all_enabled() -> dict[str, bool]:
    return dict(_current())


def is_enabled(flag: str, *, default: bool = False) -> bool:
    key = _flag_name(flag)
    if key not in KNOWN_FLAGS:
        raise ValueError(f"Unknown feature flag: {flag!r}")
    return _current().get(key, default)
