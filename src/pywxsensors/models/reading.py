"""Validated decoder reading."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from pywxsensors.exceptions import ReadingValidationError
from pywxsensors.ingestion.normalize import prune_fields, safe_float, safe_str
from pywxsensors.models._base import SensorTimestamp


def _coerce_channel(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("channel must be an integer")
    parsed = safe_float(value)
    if parsed is None:
        return 0
    if math.isinf(parsed):
        raise ValueError("channel must be finite")
    return int(parsed)


def _coerce_text(value: Any) -> Any:
    # Decoders commonly report numeric ids; identity keys are strings.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SensorReading(BaseModel):
    """One decoded signal from a wireless sensor.

    Parameters
    ----------
    protocol : str
        Decoder protocol name.
    id : str
        Sensor id as reported by the decoder.
    channel : int
        Sensor channel; ``None`` or missing means ``0``.
    type : str
        Category tag (e.g. ``"TH"``), see :mod:`pywxsensors.catalog`.
    name : str or None
        Optional human name supplied by the decoder.
    lastupdate : datetime
        When the signal was decoded.
    data : dict
        Field name → measured value. ``None`` values are dropped.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    protocol: Annotated[str, BeforeValidator(_coerce_text)]
    id: Annotated[str, BeforeValidator(_coerce_text)]
    channel: Annotated[int, BeforeValidator(_coerce_channel)] = 0
    type: str
    name: str | None = None
    lastupdate: SensorTimestamp = Field(default=None, validate_default=True)  # type: ignore[assignment]
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("protocol", "id", "type")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be non-empty")
        return value

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name_is_none(cls, value: Any) -> Any:
        return safe_str(value)

    @field_validator("data", mode="before")
    @classmethod
    def _prune_data(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return prune_fields(value)
        return value


def parse_reading(raw: Any) -> SensorReading | None:
    """Validate decoder output into a :class:`SensorReading`.

    Returns ``None`` for an absent reading (``None`` or a bare string, which
    decoders emit for unparsed signals).

    Raises
    ------
    ReadingValidationError
        When *raw* is present but not a usable reading.
    """
    if raw is None or isinstance(raw, str):
        return None
    if isinstance(raw, SensorReading):
        return raw
    if not isinstance(raw, Mapping):
        raise ReadingValidationError(f"reading must be a mapping, got {type(raw).__name__}")
    try:
        return SensorReading.model_validate(dict(raw))
    except ValidationError as exc:
        raise ReadingValidationError(f"invalid reading: {exc.error_count()} error(s)") from exc
