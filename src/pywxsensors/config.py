"""Hub configuration for pywxsensors."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pywxsensors._constants import DEFAULT_LOCALE, SNAPSHOT_EVENT, SUPPORTED_LOCALES
from pywxsensors.exceptions import WxSensorsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(env: Mapping[str, str], key: str) -> int | None:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise WxSensorsConfigError(f"{key} must be an integer, got {raw!r}") from exc


def resolve_locale(language: str | None) -> str:
    """Map a host language setting onto one of the supported locales.

    Region suffixes are ignored (``"nl-BE"`` → ``"nl"``); anything not in
    :data:`SUPPORTED_LOCALES` resolves to :data:`DEFAULT_LOCALE`.
    """
    if not language:
        return DEFAULT_LOCALE
    base = language.strip().lower().replace("_", "-").split("-", 1)[0]
    return base if base in SUPPORTED_LOCALES else DEFAULT_LOCALE


@dataclasses.dataclass(frozen=True)
class MqttSettings:
    """Broker details for the optional decoder feed.

    Parameters
    ----------
    host : str
        Broker host name.
    port : int
        Broker port.
    topic : str
        Topic the decoder publishes JSON readings on. Wildcards are allowed.
    keepalive : int
        MQTT keepalive in seconds.
    username, password : str or None
        Optional broker credentials.
    tls : bool
        Connect using TLS with the system trust store.
    client_id : str
        MQTT client id.
    """

    host: str = "localhost"
    port: int = 1883
    topic: str = "sensors/readings/#"
    keepalive: int = 60
    username: str | None = None
    password: str | None = None
    tls: bool = False
    client_id: str = "pywxsensors"


@dataclasses.dataclass(frozen=True)
class HubConfig:
    """Hub configuration.

    Parameters
    ----------
    language : str
        Host language code (e.g. ``"nl"``). Resolved once into
        :attr:`locale`; unsupported languages fall back to English.
    snapshot_event : str
        Event name used for the general snapshot broadcast.
    mqtt_enabled : bool
        Start the MQTT decoder feed when the hub is entered.
    mqtt : MqttSettings
        Broker details for the decoder feed.
    """

    language: str = DEFAULT_LOCALE
    snapshot_event: str = SNAPSHOT_EVENT
    mqtt_enabled: bool = False
    mqtt: MqttSettings = dataclasses.field(default_factory=MqttSettings)

    @property
    def locale(self) -> str:
        """The supported locale derived from :attr:`language`."""
        return resolve_locale(self.language)

    @classmethod
    def from_env(cls, **overrides: Any) -> HubConfig:
        """Create configuration from ``WXS_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        WxSensorsConfigError
            When a numeric variable cannot be parsed.
        """
        env = os.environ

        mqtt_kwargs: dict[str, Any] = {}
        _ENV_MQTT_MAP = {
            "WXS_MQTT_HOST": "host",
            "WXS_MQTT_TOPIC": "topic",
            "WXS_MQTT_USERNAME": "username",
            "WXS_MQTT_PASSWORD": "password",
            "WXS_MQTT_CLIENT_ID": "client_id",
        }
        for env_key, field_name in _ENV_MQTT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = val

        port = _env_int(env, "WXS_MQTT_PORT")
        if port is not None:
            mqtt_kwargs["port"] = port
        keepalive = _env_int(env, "WXS_MQTT_KEEPALIVE")
        if keepalive is not None:
            mqtt_kwargs["keepalive"] = keepalive
        if env.get("WXS_MQTT_TLS") is not None:
            mqtt_kwargs["tls"] = _env_bool(env.get("WXS_MQTT_TLS"), False)

        # Allow overriding broker fields via a nested dict
        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, dict):
            mqtt_kwargs.update(mqtt_overrides)
        elif isinstance(mqtt_overrides, MqttSettings):
            mqtt_kwargs = dataclasses.asdict(mqtt_overrides)

        config_kwargs: dict[str, Any] = {"mqtt": MqttSettings(**mqtt_kwargs)}

        language = env.get("WXS_LANGUAGE")
        if language is not None:
            config_kwargs["language"] = language
        event = env.get("WXS_SNAPSHOT_EVENT")
        if event is not None:
            config_kwargs["snapshot_event"] = event

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("WXS_MQTT_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
