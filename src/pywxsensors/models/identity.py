"""Sensor identity derived from decoder readings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pywxsensors.exceptions import IdentityError

if TYPE_CHECKING:
    from pywxsensors.models.reading import SensorReading

_SEPARATOR = ":"


@dataclass(frozen=True, slots=True)
class SensorIdentity:
    """The ``(protocol, id, channel)`` triple naming one physical sensor.

    Two readings with the same triple always map to equal identities. The
    decoder is trusted for uniqueness; collisions are not resolved here.
    """

    protocol: str
    id: str
    channel: int = 0

    @property
    def key(self) -> str:
        """String form used as device id during pairing."""
        return f"{self.protocol}{_SEPARATOR}{self.id}{_SEPARATOR}{self.channel}"

    def __str__(self) -> str:
        return self.key

    @classmethod
    def from_reading(cls, reading: SensorReading) -> SensorIdentity:
        return cls(protocol=reading.protocol, id=reading.id, channel=reading.channel)

    @classmethod
    def parse(cls, key: str) -> SensorIdentity:
        """Parse a key produced by :attr:`key`.

        The protocol is everything before the first separator and the
        channel everything after the last one, so ids containing ``:``
        survive a round trip.

        Raises
        ------
        IdentityError
            When *key* is not of the form ``protocol:id:channel``.
        """
        if not isinstance(key, str):
            raise IdentityError(f"identity key must be a string, got {type(key).__name__}")
        protocol, sep, rest = key.partition(_SEPARATOR)
        sensor_id, sep2, channel_text = rest.rpartition(_SEPARATOR)
        if not sep or not sep2 or not protocol or not sensor_id:
            raise IdentityError(f"malformed identity key: {key!r}", key=key)
        try:
            channel = int(channel_text)
        except ValueError as exc:
            raise IdentityError(f"malformed channel in identity key: {key!r}", key=key) from exc
        return cls(protocol=protocol, id=sensor_id, channel=channel)

    @classmethod
    def coerce(cls, value: SensorIdentity | str) -> SensorIdentity:
        """Accept either an identity or its string key."""
        if isinstance(value, SensorIdentity):
            return value
        return cls.parse(value)
