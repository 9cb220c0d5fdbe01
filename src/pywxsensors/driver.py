"""Per-category driver bridging a host platform's device lifecycle to the hub.

A host adapter subclasses :class:`SensorDriver` once per category and
implements the outbound methods (:meth:`SensorDriver.realtime` and friends)
against its own device API. Devices are mappings carrying at least
``"id"``, the sensor identity key offered by :meth:`SensorDriver.list_devices`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pywxsensors._constants import CAPABILITY_BY_FIELD
from pywxsensors.exceptions import IdentityError
from pywxsensors.models.identity import SensorIdentity

if TYPE_CHECKING:
    from pywxsensors.hub import SensorHub

_logger = logging.getLogger(__name__)


def _device_identity(device: Mapping[str, Any]) -> SensorIdentity:
    key = device.get("id")
    if not isinstance(key, str):
        raise IdentityError("device data carries no identity key")
    return SensorIdentity.parse(key)


class SensorDriver(ABC):
    """Lifecycle hooks for one sensor category (e.g. ``"TH"``).

    Abstract: a host adapter must implement every outbound hook before it
    can be instantiated.
    """

    capabilities: tuple[str, ...] = tuple(CAPABILITY_BY_FIELD.values())

    def __init__(self, hub: SensorHub, category: str) -> None:
        self._hub = hub
        self._category = category

    @property
    def category(self) -> str:
        return self._category

    # ------------------------------------------------------------------
    # Inbound lifecycle
    # ------------------------------------------------------------------

    def init(self, devices: Iterable[Mapping[str, Any]]) -> None:
        """Restore consumers paired in a previous run.

        Each device may carry its host name under ``"name"``.
        """
        for device in devices:
            self.added(device, device.get("name"))

    def added(self, device: Mapping[str, Any], name: str | None = None) -> None:
        self._hub.pair_consumer(_device_identity(device), self, dict(device), name)

    def deleted(self, device: Mapping[str, Any]) -> None:
        self._hub.unpair_consumer(_device_identity(device))

    def renamed(self, device: Mapping[str, Any], name: str) -> None:
        self._hub.rename_consumer(_device_identity(device), name)

    def list_devices(self) -> list[dict[str, Any]]:
        """Sensors of this category available for pairing."""
        _logger.debug("Sensor %s pairing has started...", self._category)
        devices = [found.model_dump(by_alias=True) for found in self._hub.list_discovered_by_category(self._category)]
        _logger.debug("Sensor %s discovered %d device(s)", self._category, len(devices))
        return devices

    def get_capability(self, device: Mapping[str, Any], capability: str) -> Any | None:
        """Current value of *capability* for a paired device, if known."""
        key = device.get("id")
        if not isinstance(key, str):
            return None
        return self._hub.get_capability_value(key, capability)

    # ------------------------------------------------------------------
    # Outbound hooks, implemented by the host adapter
    # ------------------------------------------------------------------

    @abstractmethod
    def realtime(self, handle: Any, capability: str, value: Any) -> Any: ...

    @abstractmethod
    def set_available(self, handle: Any) -> Any: ...

    @abstractmethod
    def set_unavailable(self, handle: Any, message: str) -> Any: ...

    @abstractmethod
    def set_settings(self, handle: Any, settings: dict[str, Any]) -> Any: ...
