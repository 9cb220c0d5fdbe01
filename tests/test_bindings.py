from __future__ import annotations

from pywxsensors.models.binding import ConsumerDriver, DeviceBinding
from pywxsensors.models.identity import SensorIdentity
from pywxsensors.state.bindings import BindingTable

from conftest import RecordingConsumer

IDENT = SensorIdentity("X", "1", 0)


def _binding(**overrides) -> DeviceBinding:
    kwargs = {"identity": IDENT, "driver": RecordingConsumer(), "handle": {"id": IDENT.key}, "name": "Garden"}
    kwargs.update(overrides)
    return DeviceBinding(**kwargs)


def test_recording_consumer_satisfies_driver_protocol() -> None:
    assert isinstance(RecordingConsumer(), ConsumerDriver)


def test_bind_and_get_returns_copy() -> None:
    table = BindingTable()
    assert table.bind(_binding()) is None

    fetched = table.get(IDENT)
    assert fetched is not None
    fetched.name = "changed"

    again = table.get(IDENT)
    assert again is not None
    assert again.name == "Garden"
    assert IDENT in table
    assert len(table) == 1


def test_rebinding_replaces_previous() -> None:
    table = BindingTable()
    table.bind(_binding(name="first"))

    previous = table.bind(_binding(name="second"))

    assert previous is not None and previous.name == "first"
    assert len(table) == 1
    current = table.get(IDENT)
    assert current is not None and current.name == "second"


def test_unbind_unknown_is_noop() -> None:
    table = BindingTable()
    assert table.unbind(IDENT) is None


def test_rename_unknown_is_explicit_noop() -> None:
    table = BindingTable()
    assert table.rename(IDENT, "Shed") is False
    assert table.get(IDENT) is None


def test_rename_updates_name() -> None:
    table = BindingTable()
    table.bind(_binding())
    assert table.rename(IDENT, "Shed") is True
    binding = table.get(IDENT)
    assert binding is not None and binding.name == "Shed"


def test_mark_available_transitions_once() -> None:
    table = BindingTable()
    table.bind(_binding(available=False))

    assert table.mark_available(IDENT) is True
    assert table.mark_available(IDENT) is False
    binding = table.get(IDENT)
    assert binding is not None and binding.available is True


def test_mark_available_without_binding() -> None:
    assert BindingTable().mark_available(IDENT) is False
