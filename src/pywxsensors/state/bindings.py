"""Identity-keyed table of paired consumers.

Bindings never reference records; the hub joins the two by identity at
lookup time.
"""

from __future__ import annotations

import dataclasses
import logging
import threading

from pywxsensors.models.binding import DeviceBinding
from pywxsensors.models.identity import SensorIdentity

_logger = logging.getLogger(__name__)


class BindingTable:
    """At most one :class:`DeviceBinding` per identity. Thread safe."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bindings: dict[SensorIdentity, DeviceBinding] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._bindings

    def bind(self, binding: DeviceBinding) -> DeviceBinding | None:
        """Store *binding*, returning the binding it replaced, if any."""
        with self._lock:
            previous = self._bindings.get(binding.identity)
            self._bindings[binding.identity] = dataclasses.replace(binding)
        if previous is not None:
            _logger.debug("Replaced binding for %s", binding.identity)
        return previous

    def unbind(self, identity: SensorIdentity) -> DeviceBinding | None:
        with self._lock:
            return self._bindings.pop(identity, None)

    def get(self, identity: SensorIdentity) -> DeviceBinding | None:
        with self._lock:
            binding = self._bindings.get(identity)
            return dataclasses.replace(binding) if binding is not None else None

    def rename(self, identity: SensorIdentity, name: str) -> bool:
        """Update a binding's name; ``False`` when nothing is bound."""
        with self._lock:
            binding = self._bindings.get(identity)
            if binding is None:
                return False
            binding.name = name
            return True

    def mark_available(self, identity: SensorIdentity) -> bool:
        """Flip a bound consumer to available.

        Returns ``True`` only for the call that performed the transition.
        """
        with self._lock:
            binding = self._bindings.get(identity)
            if binding is None or binding.available:
                return False
            binding.available = True
            return True
