"""Internal constants shared across the library."""

SNAPSHOT_EVENT = "sensor_update"

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES: frozenset[str] = frozenset({"en", "nl"})

# ------------------------------------------------------------------
# Reading field → consumer capability
# ------------------------------------------------------------------

CAPABILITY_BY_FIELD: dict[str, str] = {
    "temperature": "measure_temperature",
    "humidity": "measure_humidity",
    "pressure": "measure_pressure",
    "rainrate": "measure_rain",
    "raintotal": "meter_rain",
    "direction": "measure_wind_angle",
    "currentspeed": "measure_gust_strength",
    "averagespeed": "measure_wind_strength",
    "lowbattery": "alarm_battery",
}

FIELD_BY_CAPABILITY: dict[str, str] = {cap: name for name, cap in CAPABILITY_BY_FIELD.items()}


def capability_for_field(field_name: str) -> str | None:
    """Return the consumer capability a reading field is exposed as, if any."""
    return CAPABILITY_BY_FIELD.get(field_name)


def field_for_capability(capability: str) -> str | None:
    """Return the reading field backing *capability*, if any."""
    return FIELD_BY_CAPABILITY.get(capability)
