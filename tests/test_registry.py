from __future__ import annotations

import threading
from datetime import UTC, datetime

from pywxsensors.catalog import SensorTypeCatalog
from pywxsensors.models.identity import SensorIdentity
from pywxsensors.models.reading import SensorReading
from pywxsensors.state.registry import SensorRegistry

from conftest import make_reading

IDENT = SensorIdentity("X", "1", 0)


def _reading(**overrides) -> SensorReading:
    return SensorReading.model_validate(make_reading(**overrides))


def _registry(locale: str = "en") -> SensorRegistry:
    return SensorRegistry(SensorTypeCatalog(locale, tz=UTC))


def test_first_upsert_creates_record() -> None:
    registry = _registry()

    record, changed = registry.upsert(IDENT, _reading())

    assert len(registry) == 1
    assert IDENT in registry
    assert changed == {"temperature", "humidity"}
    assert record.update_count == 1
    assert record.new_data is True
    assert record.raw.data == {"temperature": 21.0, "humidity": 55}


def test_humidity_only_change_scenario() -> None:
    registry = _registry()
    registry.upsert(IDENT, _reading(data={"temperature": 21.0, "humidity": 55}))

    record, changed = registry.upsert(IDENT, _reading(data={"temperature": 21.0, "humidity": 60}))

    assert changed == {"humidity"}
    assert record.raw.data == {"temperature": 21.0, "humidity": 60}
    assert record.update_count == 2


def test_repeat_reading_has_empty_change_set_but_still_counts() -> None:
    registry = _registry()
    registry.upsert(IDENT, _reading())
    later = datetime(2026, 1, 2, 16, 0, 0, tzinfo=UTC)

    record, changed = registry.upsert(IDENT, _reading(lastupdate=later))

    assert changed == frozenset()
    assert record.new_data is False
    assert record.update_count == 2
    assert record.raw.lastupdate == later
    assert record.display.last_update == later


def test_data_is_union_of_all_fields_ever_seen() -> None:
    registry = _registry()
    registry.upsert(IDENT, _reading(data={"temperature": 20.0}))
    registry.upsert(IDENT, _reading(data={"humidity": 40}))
    record, _ = registry.upsert(IDENT, _reading(data={"temperature": 19.5, "lowbattery": True}))

    assert record.raw.data == {"temperature": 19.5, "humidity": 40, "lowbattery": True}


def test_header_fields_follow_latest_reading() -> None:
    registry = _registry()
    registry.upsert(IDENT, _reading(name="Garden"))
    record, _ = registry.upsert(IDENT, _reading(name="Shed"))

    assert record.raw.name == "Shed"
    assert record.display.name == "Shed"


def test_display_projection() -> None:
    registry = _registry("nl")
    registry.upsert(SensorIdentity("X", "7", 2), _reading(id="7", channel=2, type="W", data={"direction": 180}))
    registry.upsert(IDENT, _reading(type="ZZ"))

    wind, unknown = registry.snapshot_all()

    assert wind.protocol_name == "X"
    assert wind.type_name == "Windmeter"
    assert wind.channel_label == "2"
    assert wind.data == {"direction": 180}
    assert wind.paired is False
    assert unknown.type_name == "ZZ"
    assert unknown.channel_label == "-"


def test_returned_records_are_copies() -> None:
    registry = _registry()
    record, _ = registry.upsert(IDENT, _reading())
    record.raw.data["temperature"] = -99.0

    stored = registry.get(IDENT)
    assert stored is not None
    assert stored.raw.data["temperature"] == 21.0

    snapshot = registry.snapshot_all()
    snapshot[0].data["humidity"] = 0
    assert registry.snapshot_all()[0].data["humidity"] == 55


def test_get_and_field_lookup_for_unknowns() -> None:
    registry = _registry()
    registry.upsert(IDENT, _reading())

    assert registry.get(SensorIdentity("X", "2", 0)) is None
    assert registry.get_field_value(SensorIdentity("X", "2", 0), "temperature") is None
    assert registry.get_field_value(IDENT, "pressure") is None
    assert registry.get_field_value(IDENT, "humidity") == 55


def test_set_paired_updates_display_only_for_known_identity() -> None:
    registry = _registry()
    assert registry.set_paired(IDENT, True) is False

    registry.upsert(IDENT, _reading())
    assert registry.set_paired(IDENT, True) is True

    record = registry.get(IDENT)
    assert record is not None
    assert record.paired is True
    assert record.display.paired is True

    updated, _ = registry.upsert(IDENT, _reading(data={"temperature": 22.0}))
    assert updated.display.paired is True


def test_upsert_applies_explicit_paired_flag() -> None:
    registry = _registry()

    first, _ = registry.upsert(IDENT, _reading(), paired=True)
    assert first.paired is True
    assert first.display.paired is True

    kept, _ = registry.upsert(IDENT, _reading(data={"temperature": 22.0}))
    assert kept.display.paired is True

    cleared, _ = registry.upsert(IDENT, _reading(), paired=False)
    assert cleared.display.paired is False


class TestListByCategory:
    def test_exact_category_match_in_first_seen_order(self) -> None:
        registry = _registry()
        registry.upsert(SensorIdentity("X", "3", 0), _reading(id="3"))
        registry.upsert(SensorIdentity("X", "9", 0), _reading(id="9", type="THB"))
        registry.upsert(SensorIdentity("X", "1", 0), _reading(id="1"))
        registry.upsert(SensorIdentity("X", "3", 0), _reading(id="3", data={"temperature": 5.0}))

        first = registry.list_by_category("TH")
        second = registry.list_by_category("TH")

        assert [found.data.id for found in first] == ["X:3:0", "X:1:0"]
        assert first == second
        assert registry.list_by_category("T") == []

    def test_summary_contents(self) -> None:
        registry = _registry()
        registry.upsert(IDENT, _reading())
        registry.upsert(SensorIdentity("X", "2", 1), _reading(id="2", channel=1, name="Garden"))

        anonymous, named = registry.list_by_category("TH")

        assert anonymous.name == "TH 1"
        assert anonymous.data.type == "TH"
        assert anonymous.settings.protocol == "X"
        assert anonymous.settings.type == "Temperature/humidity"
        assert anonymous.settings.channel == "-"
        assert anonymous.settings.id == "1"
        assert anonymous.settings.last_update_formatted == "1/2/2026, 3:04:05 PM"
        assert named.name == "Garden"
        assert named.settings.type == "Garden"
        assert named.settings.channel == "1"


def test_concurrent_upserts_are_serialized() -> None:
    registry = _registry()

    def worker(offset: int) -> None:
        for i in range(200):
            registry.upsert(IDENT, _reading(data={f"f{offset}": i}))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    record = registry.get(IDENT)
    assert record is not None
    assert record.update_count == 800
    assert record.raw.data == {"f0": 199, "f1": 199, "f2": 199, "f3": 199}
