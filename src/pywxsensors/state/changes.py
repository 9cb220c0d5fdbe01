"""Field-level change detection between stored and incoming readings.

Pure functions with no stored state. Equality is exact: there is no epsilon
tolerance, so ``21.0`` → ``21.05`` is a change.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

_MISSING = object()


def values_differ(stored: Any, incoming: Any) -> bool:
    """Return True when *incoming* should replace *stored*.

    Booleans never equal numbers here (``True`` vs ``1`` is a change) so
    flags like ``lowbattery`` behave as strict comparisons.
    """
    if stored is _MISSING:
        return True
    if isinstance(stored, bool) != isinstance(incoming, bool):
        return True
    return bool(stored != incoming)


def detect_changes(stored: Mapping[str, Any], incoming: Mapping[str, Any]) -> frozenset[str]:
    """Names of fields in *incoming* that are new or differ from *stored*."""
    return frozenset(name for name, value in incoming.items() if values_differ(stored.get(name, _MISSING), value))


def merge_fields(stored: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Return the union of both mappings; *incoming* wins for shared keys.

    Neither argument is mutated and the result shares no containers with
    them.
    """
    merged = copy.deepcopy(dict(stored))
    merged.update(copy.deepcopy(dict(incoming)))
    return merged
