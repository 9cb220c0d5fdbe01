"""Base model and timestamp helpers shared by the sensor models.

Output models inherit from :class:`WxBaseModel` which provides:

* ``alias_generator=to_camel`` so hosts can ``model_dump(by_alias=True)``
  into the camelCase shape a settings page or pairing UI expects.
* ``populate_by_name=True`` so the library itself keeps using
  snake_case field names.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def _utcnow() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(value: Any) -> datetime:
    """Coerce a decoder timestamp into a timezone-aware datetime.

    Accepts datetimes, ISO-8601 strings and epoch numbers (seconds **or**
    milliseconds). ``None`` means "now": decoders that do not stamp their
    output are stamped on arrival. Naive datetimes are assumed to be UTC.
    """
    if value is None:
        return _utcnow()
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, bool):
        raise ValueError("timestamp must not be a boolean")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            raise ValueError("timestamp must not be NaN")
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return _utcnow()
        if text.lstrip("-").replace(".", "", 1).isdigit():
            return parse_timestamp(float(text))
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    raise ValueError(f"unsupported timestamp value: {value!r}")


SensorTimestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces decoder timestamps to aware datetimes."""


class WxBaseModel(BaseModel):
    """Base for read-only projections handed to hosts."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )
