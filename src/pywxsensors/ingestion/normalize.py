"""Normalization helpers.

Centralizes defensive parsing of decoder output.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def is_meaningful(value: Any) -> bool:
    """Return True if a data field carries a value worth storing.

    Only ``None`` is dropped: a decoder reporting ``0`` or ``False`` (e.g.
    ``lowbattery``) is a real measurement.
    """
    return value is not None


def prune_fields(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop fields without a value from a reading's data mapping.

    Missing keys mean "no update" for the registry, so a decoder emitting
    ``null`` for a field it could not decode never clobbers a stored value.
    """
    if not data:
        return {}
    return {str(key): value for key, value in data.items() if is_meaningful(value)}
