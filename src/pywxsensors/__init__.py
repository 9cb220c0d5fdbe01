"""pywxsensors - change-detecting registry for wireless weather sensors."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pywxsensors")
except PackageNotFoundError:
    __version__ = "0+local"
from pywxsensors.catalog import SensorTypeCatalog
from pywxsensors.config import HubConfig, MqttSettings
from pywxsensors.dispatch import NotificationDispatcher
from pywxsensors.driver import SensorDriver
from pywxsensors.exceptions import (
    DeliveryError,
    IdentityError,
    ReadingValidationError,
    WxSensorsConfigError,
    WxSensorsError,
)
from pywxsensors.hub import SensorHub
from pywxsensors.models import (
    ConsumerDriver,
    DeviceBinding,
    DiscoveredSensor,
    SensorDisplay,
    SensorIdentity,
    SensorReading,
    SensorRecord,
)
from pywxsensors.state.bindings import BindingTable
from pywxsensors.state.registry import SensorRegistry

__all__ = [
    "__version__",
    "BindingTable",
    "ConsumerDriver",
    "DeliveryError",
    "DeviceBinding",
    "DiscoveredSensor",
    "HubConfig",
    "IdentityError",
    "MqttSettings",
    "NotificationDispatcher",
    "ReadingValidationError",
    "SensorDisplay",
    "SensorDriver",
    "SensorHub",
    "SensorIdentity",
    "SensorReading",
    "SensorRecord",
    "SensorRegistry",
    "SensorTypeCatalog",
    "WxSensorsConfigError",
    "WxSensorsError",
]
