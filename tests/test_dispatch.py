from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime

import pytest

from pywxsensors.dispatch import (
    AvailabilityChange,
    CapabilityUpdate,
    NotificationDispatcher,
    SettingsUpdate,
    SnapshotBroadcast,
    UnavailableNotice,
)
from pywxsensors.exceptions import DeliveryError
from pywxsensors.models.record import SensorDisplay

from conftest import RecordingConsumer, SnapshotRecorder


def _display() -> SensorDisplay:
    return SensorDisplay(
        protocol_name="X",
        type_name="Temperature/humidity",
        channel_label="-",
        id="1",
        last_update=datetime(2026, 1, 2, tzinfo=UTC),
        data={"temperature": 21.0},
    )


@pytest.mark.asyncio
async def test_notifications_delivered_in_order() -> None:
    consumer = RecordingConsumer()
    recorder = SnapshotRecorder()
    dispatcher = NotificationDispatcher([recorder])
    await dispatcher.start()

    dispatcher.post_many(
        [
            CapabilityUpdate(driver=consumer, handle="h", capability="measure_temperature", value=21.0),
            AvailabilityChange(driver=consumer, handle="h"),
            SettingsUpdate(driver=consumer, handle="h", settings={"lastUpdate": "now"}),
            UnavailableNotice(driver=consumer, handle="h", message="No data received yet"),
            SnapshotBroadcast(event="sensor_update", displays=[_display()]),
        ]
    )
    await dispatcher.drain()
    await dispatcher.stop()

    assert consumer.calls == [
        ("realtime", "h", "measure_temperature", 21.0),
        ("set_available", "h"),
        ("set_settings", "h", {"lastUpdate": "now"}),
        ("set_unavailable", "h", "No data received yet"),
    ]
    assert [event for event, _ in recorder.events] == ["sensor_update"]
    assert dispatcher.delivered == 5
    assert dispatcher.is_running is False


@pytest.mark.asyncio
async def test_failed_delivery_does_not_stop_later_notifications() -> None:
    consumer = RecordingConsumer(fail_on={"realtime"})
    errors: list[DeliveryError] = []
    dispatcher = NotificationDispatcher(on_error=errors.append)
    await dispatcher.start()

    dispatcher.post(CapabilityUpdate(driver=consumer, handle="h", capability="measure_humidity", value=60))
    dispatcher.post(AvailabilityChange(driver=consumer, handle="h"))
    await dispatcher.drain()
    await dispatcher.stop()

    assert [call[0] for call in consumer.calls] == ["realtime", "set_available"]
    assert dispatcher.failed == 1
    assert dispatcher.delivered == 1
    assert len(errors) == 1
    assert errors[0].kind == "CapabilityUpdate"
    assert errors[0].handle == "h"
    assert isinstance(errors[0].__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_failing_subscriber_isolated_from_others() -> None:
    def broken(_event: str, _displays: list[SensorDisplay]) -> None:
        raise ValueError("feed offline")

    recorder = SnapshotRecorder()
    dispatcher = NotificationDispatcher([broken, recorder])
    await dispatcher.start()

    dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))
    await dispatcher.drain()
    await dispatcher.stop()

    assert len(recorder.events) == 1
    assert dispatcher.failed == 1


@pytest.mark.asyncio
async def test_async_callbacks_are_awaited() -> None:
    seen: list[str] = []

    async def subscriber(event: str, _displays: list[SensorDisplay]) -> None:
        await asyncio.sleep(0)
        seen.append(event)

    dispatcher = NotificationDispatcher([subscriber])
    await dispatcher.start()
    dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))
    await dispatcher.drain()
    await dispatcher.stop()

    assert seen == ["sensor_update"]


@pytest.mark.asyncio
async def test_posts_before_start_are_delivered_after_start() -> None:
    recorder = SnapshotRecorder()
    dispatcher = NotificationDispatcher()
    dispatcher.subscribe(recorder)
    dispatcher.subscribe(recorder)

    dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))
    assert dispatcher.pending == 1

    await dispatcher.start()
    await dispatcher.drain()
    await dispatcher.stop()

    assert len(recorder.events) == 1


@pytest.mark.asyncio
async def test_post_from_other_thread() -> None:
    recorder = SnapshotRecorder()
    dispatcher = NotificationDispatcher([recorder])
    await dispatcher.start()

    thread = threading.Thread(
        target=dispatcher.post,
        args=(SnapshotBroadcast(event="sensor_update", displays=[]),),
    )
    thread.start()
    thread.join()
    # Let the call_soon_threadsafe callback run.
    await asyncio.sleep(0)
    await dispatcher.drain()
    await dispatcher.stop()

    assert len(recorder.events) == 1


@pytest.mark.asyncio
async def test_unsubscribe() -> None:
    recorder = SnapshotRecorder()
    dispatcher = NotificationDispatcher([recorder])
    dispatcher.unsubscribe(recorder)
    await dispatcher.start()
    dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))
    await dispatcher.drain()
    await dispatcher.stop()

    assert recorder.events == []


def test_backlog_without_worker_is_capped() -> None:
    dispatcher = NotificationDispatcher(backlog_limit=2)
    for _ in range(3):
        dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))

    assert dispatcher.pending == 2
    assert dispatcher.dropped == 1


@pytest.mark.asyncio
async def test_post_from_other_thread_after_stop_is_held() -> None:
    recorder = SnapshotRecorder()
    dispatcher = NotificationDispatcher([recorder])
    await dispatcher.start()
    await dispatcher.stop()

    errors: list[BaseException] = []

    def post() -> None:
        try:
            dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    thread = threading.Thread(target=post)
    thread.start()
    thread.join()

    assert errors == []
    assert dispatcher.pending == 1
    assert recorder.events == []


def test_post_to_closed_loop_is_dropped() -> None:
    dispatcher = NotificationDispatcher()
    loop = asyncio.new_event_loop()
    loop.run_until_complete(dispatcher.start())
    loop.close()

    dispatcher.post(SnapshotBroadcast(event="sensor_update", displays=[]))

    assert dispatcher.dropped == 1
    assert dispatcher.pending == 0
