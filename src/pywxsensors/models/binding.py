"""Consumer bindings and the outbound driver protocol."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pywxsensors.models.identity import SensorIdentity


@runtime_checkable
class ConsumerDriver(Protocol):
    """Outbound callbacks into the host platform for paired consumers.

    Implementations may be synchronous or return awaitables; the dispatcher
    awaits whatever comes back. Raising is allowed and only logged.
    """

    def realtime(self, handle: Any, capability: str, value: Any) -> Awaitable[Any] | Any: ...

    def set_available(self, handle: Any) -> Awaitable[Any] | Any: ...

    def set_unavailable(self, handle: Any, message: str) -> Awaitable[Any] | Any: ...

    def set_settings(self, handle: Any, settings: dict[str, Any]) -> Awaitable[Any] | Any: ...


@dataclass(slots=True)
class DeviceBinding:
    """Association between an identity and a paired consumer.

    ``available`` starts out ``True`` only when the sensor had already
    reported at pairing time, and once ``True`` it stays ``True``.
    """

    identity: SensorIdentity
    driver: ConsumerDriver
    handle: Any
    name: str | None = None
    available: bool = False
