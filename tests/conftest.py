from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from pywxsensors.config import HubConfig
from pywxsensors.hub import SensorHub
from pywxsensors.models.record import SensorDisplay


@dataclass
class RecordingConsumer:
    """Host-side driver double recording every outbound call."""

    calls: list[tuple[Any, ...]] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise RuntimeError(f"{call[0]} failed")

    def realtime(self, handle: Any, capability: str, value: Any) -> bool:
        self._record("realtime", handle, capability, value)
        return True

    def set_available(self, handle: Any) -> None:
        self._record("set_available", handle)

    def set_unavailable(self, handle: Any, message: str) -> None:
        self._record("set_unavailable", handle, message)

    def set_settings(self, handle: Any, settings: dict[str, Any]) -> bool:
        self._record("set_settings", handle, settings)
        return True

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]


@dataclass
class SnapshotRecorder:
    events: list[tuple[str, list[SensorDisplay]]] = field(default_factory=list)

    def __call__(self, event: str, displays: list[SensorDisplay]) -> None:
        self.events.append((event, displays))


def make_reading(**overrides: Any) -> dict[str, Any]:
    reading: dict[str, Any] = {
        "protocol": "X",
        "id": "1",
        "channel": 0,
        "type": "TH",
        "lastupdate": datetime(2026, 1, 2, 15, 4, 5, tzinfo=UTC),
        "data": {"temperature": 21.0, "humidity": 55},
    }
    reading.update(overrides)
    return reading


@pytest.fixture
def consumer() -> RecordingConsumer:
    return RecordingConsumer()


@pytest.fixture
def snapshots() -> SnapshotRecorder:
    return SnapshotRecorder()


@pytest.fixture
def hub(snapshots: SnapshotRecorder) -> SensorHub:
    return SensorHub(HubConfig(), on_snapshot=snapshots, tz=UTC)
