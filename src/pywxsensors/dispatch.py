"""Fire-and-forget delivery of sensor notifications.

The hub posts notifications after its state mutation has committed; a single
worker task on the event loop delivers them in order. Delivery failures are
logged and never reach the poster.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from pywxsensors.exceptions import DeliveryError
from pywxsensors.models.binding import ConsumerDriver
from pywxsensors.models.record import SensorDisplay

_logger = logging.getLogger(__name__)

DEFAULT_BACKLOG_LIMIT = 1000

SnapshotSubscriber = Callable[[str, list[SensorDisplay]], Any]


@dataclass(frozen=True)
class CapabilityUpdate:
    driver: ConsumerDriver
    handle: Any
    capability: str
    value: Any


@dataclass(frozen=True)
class AvailabilityChange:
    driver: ConsumerDriver
    handle: Any


@dataclass(frozen=True)
class UnavailableNotice:
    driver: ConsumerDriver
    handle: Any
    message: str


@dataclass(frozen=True)
class SettingsUpdate:
    driver: ConsumerDriver
    handle: Any
    settings: dict[str, Any]


@dataclass(frozen=True)
class SnapshotBroadcast:
    event: str
    displays: list[SensorDisplay]


Notification = CapabilityUpdate | AvailabilityChange | UnavailableNotice | SettingsUpdate | SnapshotBroadcast


def _kind(notification: Notification) -> str:
    return type(notification).__name__


class NotificationDispatcher:
    """Queue-backed notification delivery.

    Parameters
    ----------
    subscribers : iterable of callables
        General subscribers receiving ``(event_name, displays)`` for every
        snapshot broadcast.
    on_error : callable or None
        Optional hook receiving a :class:`DeliveryError` for every failed
        delivery, in addition to the DEBUG log entry.
    backlog_limit : int
        Most notifications held while no worker is running. Further posts
        are dropped and counted in :attr:`dropped`.
    """

    def __init__(
        self,
        subscribers: Iterable[SnapshotSubscriber] = (),
        *,
        on_error: Callable[[DeliveryError], None] | None = None,
        backlog_limit: int = DEFAULT_BACKLOG_LIMIT,
    ) -> None:
        self._subscribers: list[SnapshotSubscriber] = list(subscribers)
        self._on_error = on_error
        self._backlog_limit = backlog_limit
        self._queue: asyncio.Queue[Notification] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._worker: asyncio.Task[None] | None = None
        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def subscribe(self, subscriber: SnapshotSubscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: SnapshotSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self.is_running:
            return
        self._loop = asyncio.get_running_loop()
        self._worker = self._loop.create_task(self._run(), name="pywxsensors-dispatcher")

    async def drain(self) -> None:
        """Wait until every notification posted so far has been delivered."""
        await self._queue.join()

    async def stop(self) -> None:
        """Deliver what is queued, then stop the worker."""
        worker = self._worker
        if worker is None:
            return
        if not worker.done():
            await self.drain()
        self._worker = None
        self._loop = None
        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker

    # ------------------------------------------------------------------
    # Posting
    # ------------------------------------------------------------------

    def post(self, notification: Notification) -> None:
        """Queue *notification* without waiting for delivery.

        Safe to call from any thread once the dispatcher has started.
        While no worker runs, up to ``backlog_limit`` notifications are held
        and delivered once it starts; anything beyond that is dropped.
        """
        loop = self._loop
        if loop is None:
            if self._queue.qsize() >= self._backlog_limit:
                self._drop(notification, "backlog full")
                return
            self._queue.put_nowait(notification)
            return
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None
        if current_loop is loop:
            self._queue.put_nowait(notification)
            return
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, notification)
        except RuntimeError:
            # Loop closed without stop().
            self._drop(notification, "event loop closed")

    def _drop(self, notification: Notification, reason: str) -> None:
        self.dropped += 1
        _logger.debug("Dropping %s notification: %s", _kind(notification), reason)

    def post_many(self, notifications: Iterable[Notification]) -> None:
        for notification in notifications:
            self.post(notification)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self.deliver(notification)
            finally:
                self._queue.task_done()

    async def deliver(self, notification: Notification) -> None:
        """Deliver one notification now, isolating callback failures."""
        if isinstance(notification, SnapshotBroadcast):
            for subscriber in list(self._subscribers):
                await self._invoke(notification, None, subscriber, notification.event, notification.displays)
            return
        if isinstance(notification, CapabilityUpdate):
            await self._invoke(
                notification,
                notification.handle,
                notification.driver.realtime,
                notification.handle,
                notification.capability,
                notification.value,
            )
        elif isinstance(notification, AvailabilityChange):
            await self._invoke(notification, notification.handle, notification.driver.set_available, notification.handle)
        elif isinstance(notification, UnavailableNotice):
            await self._invoke(
                notification,
                notification.handle,
                notification.driver.set_unavailable,
                notification.handle,
                notification.message,
            )
        elif isinstance(notification, SettingsUpdate):
            await self._invoke(
                notification,
                notification.handle,
                notification.driver.set_settings,
                notification.handle,
                dict(notification.settings),
            )

    async def _invoke(
        self,
        notification: Notification,
        handle: Any,
        callback: Callable[..., Any],
        *args: Any,
    ) -> None:
        kind = _kind(notification)
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.failed += 1
            _logger.debug("%s delivery failed handle=%r", kind, handle, exc_info=True)
            if self._on_error is not None:
                error = DeliveryError(f"{kind} delivery failed: {exc}", kind=kind, handle=handle)
                error.__cause__ = exc
                try:
                    self._on_error(error)
                except Exception:
                    _logger.debug("Delivery error hook failed", exc_info=True)
            return
        self.delivered += 1
        _logger.debug("%s delivered handle=%r", kind, handle)
