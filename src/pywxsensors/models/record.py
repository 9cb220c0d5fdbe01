"""Stored sensor state and its display projections."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pywxsensors.models._base import WxBaseModel
from pywxsensors.models.reading import SensorReading


class SensorDisplay(WxBaseModel):
    """Human-facing projection of a record, broadcast in snapshots."""

    protocol_name: str
    type_name: str
    name: str | None = None
    channel_label: str
    id: str
    last_update: datetime
    data: dict[str, Any] = Field(default_factory=dict)
    paired: bool = False


class SensorRecord(BaseModel):
    """Latest known state for one identity.

    ``raw`` is the last reading with ``data`` replaced by the union of every
    field seen so far. ``display`` is derived from ``raw`` and is never
    edited independently.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    raw: SensorReading
    display: SensorDisplay
    update_count: int = 0
    new_data: bool = False
    paired: bool = False


class DiscoveredSensorData(WxBaseModel):
    id: str
    type: str


class DiscoveredSensorSettings(WxBaseModel):
    protocol: str
    type: str
    channel: str
    id: str
    last_update_formatted: str


class DiscoveredSensor(WxBaseModel):
    """A sensor offered to the pairing flow for one category."""

    name: str
    data: DiscoveredSensorData
    settings: DiscoveredSensorSettings
