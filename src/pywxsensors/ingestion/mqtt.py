"""MQTT ingestion helpers.

This module turns decoder MQTT payloads into raw readings for the hub.
"""

from __future__ import annotations

import json
from typing import Any

from pywxsensors.exceptions import ReadingValidationError


def decode_reading_payload(payload: bytes) -> list[dict[str, Any]]:
    """Parse a decoder payload into raw reading dicts.

    Decoders publish either one JSON object per message or a JSON array of
    objects. A ``{"reading": {...}}`` envelope is unwrapped.

    Raises
    ------
    ReadingValidationError
        When the payload is not UTF-8 JSON of the expected shape.
    """
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ReadingValidationError("MQTT payload is not UTF-8 JSON") from exc

    items = parsed if isinstance(parsed, list) else [parsed]
    readings: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            raise ReadingValidationError("MQTT payload contains a non-object reading")
        inner = item.get("reading")
        readings.append(inner if isinstance(inner, dict) else item)
    return readings
