"""Sensor hub: the entry point decoders and pairing hooks call into."""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import tzinfo
from typing import Any

from pywxsensors._constants import capability_for_field, field_for_capability
from pywxsensors._mqtt import SensorMqttRuntime
from pywxsensors.catalog import SensorTypeCatalog
from pywxsensors.config import HubConfig
from pywxsensors.dispatch import (
    AvailabilityChange,
    CapabilityUpdate,
    Notification,
    NotificationDispatcher,
    SettingsUpdate,
    SnapshotBroadcast,
    SnapshotSubscriber,
    UnavailableNotice,
)
from pywxsensors.exceptions import IdentityError, ReadingValidationError
from pywxsensors.models.binding import ConsumerDriver, DeviceBinding
from pywxsensors.models.identity import SensorIdentity
from pywxsensors.models.reading import parse_reading
from pywxsensors.models.record import DiscoveredSensor, SensorDisplay, SensorRecord
from pywxsensors.state.bindings import BindingTable
from pywxsensors.state.registry import SensorRegistry

_logger = logging.getLogger(__name__)

IdentityLike = SensorIdentity | str


class SensorHub:
    """Change-detecting registry of wireless sensors and their consumers.

    Usage::

        async with SensorHub(HubConfig(language="nl"), on_snapshot=feed) as hub:
            hub.submit_reading(decoded)

    Mutations are serialized by one hub-level lock and never wait on
    delivery: notifications are posted to the dispatcher after the
    registry has committed.
    """

    def __init__(
        self,
        config: HubConfig | None = None,
        *,
        on_snapshot: SnapshotSubscriber | None = None,
        catalog: SensorTypeCatalog | None = None,
        registry: SensorRegistry | None = None,
        bindings: BindingTable | None = None,
        dispatcher: NotificationDispatcher | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._config = config or HubConfig()
        self._catalog = catalog or SensorTypeCatalog(self._config.locale, tz=tz)
        self._registry = registry or SensorRegistry(self._catalog)
        self._bindings = bindings or BindingTable()
        self._dispatcher = dispatcher or NotificationDispatcher()
        if on_snapshot is not None:
            self._dispatcher.subscribe(on_snapshot)
        self._lock = threading.RLock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._mqtt_runtime: SensorMqttRuntime | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SensorHub:
        self._loop = asyncio.get_running_loop()
        await self._dispatcher.start()
        if self._config.mqtt_enabled:
            await self._start_mqtt()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._stop_mqtt()
        await self._dispatcher.stop()
        self._loop = None

    async def _start_mqtt(self) -> None:
        assert self._loop is not None  # noqa: S101
        runtime = SensorMqttRuntime(loop=self._loop, on_reading=self.submit_reading, logger=_logger)
        try:
            await self._loop.run_in_executor(None, runtime.start, self._config.mqtt)
        except Exception:
            _logger.warning("MQTT decoder feed failed to start", exc_info=True)
            return
        self._mqtt_runtime = runtime

    async def _stop_mqtt(self) -> None:
        runtime = self._mqtt_runtime
        self._mqtt_runtime = None
        if runtime is None or self._loop is None:
            return
        try:
            await self._loop.run_in_executor(None, runtime.stop)
        except Exception:
            _logger.debug("MQTT runtime stop failed", exc_info=True)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> HubConfig:
        return self._config

    @property
    def catalog(self) -> SensorTypeCatalog:
        return self._catalog

    @property
    def registry(self) -> SensorRegistry:
        return self._registry

    @property
    def bindings(self) -> BindingTable:
        return self._bindings

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    @property
    def mqtt_runtime(self) -> SensorMqttRuntime | None:
        return self._mqtt_runtime

    # ------------------------------------------------------------------
    # Decoder input
    # ------------------------------------------------------------------

    def submit_reading(self, raw: Any) -> bool:
        """Accept one decoded reading.

        Returns ``True`` when the reading was accepted. Absent or malformed
        readings are dropped without touching state or notifying anyone.
        """
        try:
            reading = parse_reading(raw)
        except ReadingValidationError:
            _logger.debug("Dropping malformed reading", exc_info=True)
            return False
        if reading is None:
            return False

        identity = SensorIdentity.from_reading(reading)
        notifications: list[Notification] = []
        with self._lock:
            binding = self._bindings.get(identity)
            record, changed = self._registry.upsert(identity, reading, paired=binding is not None)
            became_available = binding is not None and self._bindings.mark_available(identity)
            snapshot = self._registry.snapshot_all()

        if binding is not None:
            # Decoder field order, so consumers see updates as the signal listed them.
            for field_name in reading.data:
                capability = capability_for_field(field_name)
                if field_name in changed and capability is not None:
                    notifications.append(
                        CapabilityUpdate(
                            driver=binding.driver,
                            handle=binding.handle,
                            capability=capability,
                            value=record.raw.data[field_name],
                        )
                    )
            if became_available:
                _logger.debug("Consumer for %s received its first data", identity)
                notifications.append(AvailabilityChange(driver=binding.driver, handle=binding.handle))
            notifications.append(
                SettingsUpdate(
                    driver=binding.driver,
                    handle=binding.handle,
                    settings={"lastUpdate": self._catalog.format_timestamp(record.raw.lastupdate)},
                )
            )
        notifications.append(SnapshotBroadcast(event=self._config.snapshot_event, displays=snapshot))
        self._dispatcher.post_many(notifications)
        return True

    # ------------------------------------------------------------------
    # Pairing lifecycle
    # ------------------------------------------------------------------

    def pair_consumer(
        self,
        identity: IdentityLike,
        driver: ConsumerDriver,
        handle: Any,
        name: str | None = None,
    ) -> DeviceBinding:
        """Bind a consumer to a sensor.

        A consumer paired before its sensor has reported is told so through
        ``driver.set_unavailable`` and becomes available on first data.

        Raises
        ------
        IdentityError
            When *identity* is a malformed key.
        """
        ident = SensorIdentity.coerce(identity)
        with self._lock:
            has_record = self._registry.set_paired(ident, True)
            binding = DeviceBinding(identity=ident, driver=driver, handle=handle, name=name, available=has_record)
            self._bindings.bind(binding)

        if not has_record:
            _logger.debug("Paired %s before any data was received", ident)
            self._dispatcher.post(
                UnavailableNotice(driver=driver, handle=handle, message=self._catalog.message("error.no_data"))
            )
        return DeviceBinding(identity=ident, driver=driver, handle=handle, name=name, available=has_record)

    def unpair_consumer(self, identity: IdentityLike) -> bool:
        """Remove a binding; the sensor record itself is kept."""
        ident = SensorIdentity.coerce(identity)
        with self._lock:
            removed = self._bindings.unbind(ident)
            self._registry.set_paired(ident, False)
        return removed is not None

    def rename_consumer(self, identity: IdentityLike, name: str) -> bool:
        """Rename a bound consumer. No-op returning ``False`` when unbound.

        Only the binding's name changes; the record's display name keeps
        following the decoder.
        """
        ident = SensorIdentity.coerce(identity)
        with self._lock:
            renamed = self._bindings.rename(ident, name)
        if not renamed:
            _logger.debug("Rename ignored for unbound sensor %s", ident)
        return renamed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_discovered_by_category(self, category: str) -> list[DiscoveredSensor]:
        return self._registry.list_by_category(category)

    def snapshot(self) -> list[SensorDisplay]:
        return self._registry.snapshot_all()

    def get_record(self, identity: IdentityLike) -> SensorRecord | None:
        ident = self._lookup_identity(identity)
        return self._registry.get(ident) if ident is not None else None

    def get_binding(self, identity: IdentityLike) -> DeviceBinding | None:
        ident = self._lookup_identity(identity)
        return self._bindings.get(ident) if ident is not None else None

    def get_sensor_value(self, identity: IdentityLike, field_name: str) -> Any | None:
        ident = self._lookup_identity(identity)
        return self._registry.get_field_value(ident, field_name) if ident is not None else None

    def get_capability_value(self, identity: IdentityLike, capability: str) -> Any | None:
        field_name = field_for_capability(capability)
        if field_name is None:
            return None
        return self.get_sensor_value(identity, field_name)

    @staticmethod
    def _lookup_identity(identity: IdentityLike) -> SensorIdentity | None:
        try:
            return SensorIdentity.coerce(identity)
        except IdentityError:
            return None
