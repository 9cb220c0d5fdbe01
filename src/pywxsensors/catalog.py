"""Localized sensor category names and status messages.

The active locale is fixed when the catalog is built; lookups fall back to
English when a translation is missing.
"""

from __future__ import annotations

from datetime import datetime, tzinfo

from pywxsensors._constants import DEFAULT_LOCALE
from pywxsensors.config import resolve_locale

GENERIC_TYPES: dict[str, dict[str, str]] = {
    "R": {"en": "Rain gauge", "nl": "Regenmeter"},
    "TH": {"en": "Temperature/humidity", "nl": "Temperatuur/vochtigheid"},
    "THB": {"en": "Weather station", "nl": "Weerstation"},
    "UV": {"en": "Ultra Violet"},
    "W": {"en": "Anemometer", "nl": "Windmeter"},
}

MESSAGES: dict[str, dict[str, str]] = {
    "error.no_data": {
        "en": "No data received yet",
        "nl": "Nog geen gegevens ontvangen",
    },
}


def _format_en(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d}:{value.second:02d} {suffix}"


def _format_nl(value: datetime) -> str:
    return f"{value.day}-{value.month}-{value.year}, {value.hour:02d}:{value.minute:02d}:{value.second:02d}"


_TIMESTAMP_FORMATTERS = {
    "en": _format_en,
    "nl": _format_nl,
}


class SensorTypeCatalog:
    """Static category lookup bound to one locale.

    Parameters
    ----------
    locale : str
        Host language; unsupported values resolve to English.
    tz : tzinfo or None
        Zone used when formatting timestamps. ``None`` uses the host's
        local zone.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE, *, tz: tzinfo | None = None) -> None:
        self._locale = resolve_locale(locale)
        self._tz = tz

    @property
    def locale(self) -> str:
        return self._locale

    def type_name(self, category: str) -> str:
        """Localized name for *category*; the tag itself when unknown."""
        names = GENERIC_TYPES.get(category)
        if names is None:
            return category
        return names.get(self._locale) or names[DEFAULT_LOCALE]

    def message(self, key: str) -> str:
        texts = MESSAGES.get(key)
        if texts is None:
            return key
        return texts.get(self._locale) or texts[DEFAULT_LOCALE]

    def format_timestamp(self, value: datetime) -> str:
        """Format *value* the way the locale renders a date and time."""
        local = value.astimezone(self._tz)
        return _TIMESTAMP_FORMATTERS[self._locale](local)

    def categories(self) -> list[str]:
        return list(GENERIC_TYPES)
