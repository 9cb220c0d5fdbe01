"""Data models for sensor readings, records and bindings."""

from pywxsensors.models._base import SensorTimestamp, WxBaseModel, parse_timestamp
from pywxsensors.models.binding import ConsumerDriver, DeviceBinding
from pywxsensors.models.identity import SensorIdentity
from pywxsensors.models.reading import SensorReading, parse_reading
from pywxsensors.models.record import (
    DiscoveredSensor,
    DiscoveredSensorData,
    DiscoveredSensorSettings,
    SensorDisplay,
    SensorRecord,
)

__all__ = [
    "ConsumerDriver",
    "DeviceBinding",
    "DiscoveredSensor",
    "DiscoveredSensorData",
    "DiscoveredSensorSettings",
    "SensorDisplay",
    "SensorIdentity",
    "SensorReading",
    "SensorRecord",
    "SensorTimestamp",
    "WxBaseModel",
    "parse_reading",
    "parse_timestamp",
]
