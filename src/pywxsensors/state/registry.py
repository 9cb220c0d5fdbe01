"""Deterministic in-memory sensor registry.

This is the only component allowed to merge readings into stored state.
Records are created on first sight and never removed.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any

from pywxsensors.catalog import SensorTypeCatalog
from pywxsensors.models.identity import SensorIdentity
from pywxsensors.models.reading import SensorReading
from pywxsensors.models.record import (
    DiscoveredSensor,
    DiscoveredSensorData,
    DiscoveredSensorSettings,
    SensorDisplay,
    SensorRecord,
)
from pywxsensors.state.changes import detect_changes, merge_fields

_logger = logging.getLogger(__name__)


def _channel_label(channel: int) -> str:
    return str(channel) if channel else "-"


class SensorRegistry:
    """Latest known reading per identity.

    All methods are thread safe. Readers always receive copies, so a record
    handed out is never observed half-merged or changed afterwards.
    """

    def __init__(self, catalog: SensorTypeCatalog) -> None:
        self._catalog = catalog
        self._lock = threading.Lock()
        self._records: dict[SensorIdentity, SensorRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._records

    def _project(self, raw: SensorReading, paired: bool) -> SensorDisplay:
        return SensorDisplay(
            protocol_name=raw.protocol,
            type_name=self._catalog.type_name(raw.type),
            name=raw.name,
            channel_label=_channel_label(raw.channel),
            id=raw.id,
            last_update=raw.lastupdate,
            data=copy.deepcopy(raw.data),
            paired=paired,
        )

    def upsert(
        self,
        identity: SensorIdentity,
        reading: SensorReading,
        *,
        paired: bool | None = None,
    ) -> tuple[SensorRecord, frozenset[str]]:
        """Merge *reading* into the record for *identity*.

        *paired* sets the display paired flag; ``None`` keeps the stored one.
        Returns a copy of the stored record and the names of the fields
        whose value changed (or appeared for the first time).
        """
        with self._lock:
            current = self._records.get(identity)
            if current is None:
                stored: dict[str, Any] = {}
                update_count = 0
                stored_paired = False
            else:
                stored = current.raw.data
                update_count = current.update_count
                stored_paired = current.paired
            if paired is None:
                paired = stored_paired

            changed = detect_changes(stored, reading.data)
            raw = reading.model_copy(update={"data": merge_fields(stored, reading.data)})
            record = SensorRecord(
                raw=raw,
                display=self._project(raw, paired),
                update_count=update_count + 1,
                new_data=bool(changed),
                paired=paired,
            )
            self._records[identity] = record
            total = len(self._records)
            result = record.model_copy(deep=True)

        if current is None:
            _logger.debug("Found a new sensor %s. Total found is now %d", identity, total)
        _logger.debug("Sensor %s value has changed: %s %s", identity, bool(changed), sorted(changed))
        return result, changed

    def get(self, identity: SensorIdentity) -> SensorRecord | None:
        with self._lock:
            record = self._records.get(identity)
            return record.model_copy(deep=True) if record is not None else None

    def get_field_value(self, identity: SensorIdentity, field_name: str) -> Any | None:
        """Latest value of one field; ``None`` for unknown identity or field."""
        with self._lock:
            record = self._records.get(identity)
            if record is None:
                return None
            return copy.deepcopy(record.raw.data.get(field_name))

    def set_paired(self, identity: SensorIdentity, paired: bool) -> bool:
        """Flip the paired flag of an existing record.

        Returns ``False`` (and changes nothing) when *identity* has not
        reported yet.
        """
        with self._lock:
            record = self._records.get(identity)
            if record is None:
                return False
            self._records[identity] = record.model_copy(
                update={
                    "paired": paired,
                    "display": record.display.model_copy(update={"paired": paired}),
                }
            )
            return True

    def list_by_category(self, category: str) -> list[DiscoveredSensor]:
        """Sensors whose reading type equals *category*, in first-seen order."""
        with self._lock:
            matches = [(identity, record) for identity, record in self._records.items() if record.raw.type == category]

        return [
            DiscoveredSensor(
                name=record.raw.name or f"{category} {record.raw.id}",
                data=DiscoveredSensorData(id=identity.key, type=category),
                settings=DiscoveredSensorSettings(
                    protocol=record.display.protocol_name,
                    type=record.raw.name or record.display.type_name,
                    channel=record.display.channel_label,
                    id=record.raw.id,
                    last_update_formatted=self._catalog.format_timestamp(record.raw.lastupdate),
                ),
            )
            for identity, record in matches
        ]

    def snapshot_all(self) -> list[SensorDisplay]:
        """Display projections of every record, in first-seen order."""
        with self._lock:
            return [record.display.model_copy(deep=True) for record in self._records.values()]
