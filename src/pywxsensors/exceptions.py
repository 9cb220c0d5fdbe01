"""Custom exception hierarchy for pywxsensors."""

from __future__ import annotations


class WxSensorsError(Exception):
    """Base exception for all pywxsensors errors."""


class WxSensorsConfigError(WxSensorsError):
    """Invalid or missing configuration."""


class ReadingValidationError(WxSensorsError):
    """A raw reading could not be turned into a :class:`SensorReading`.

    ``submit_reading`` catches this and drops the reading; it is only
    surfaced to callers that use :func:`pywxsensors.models.reading.parse_reading`
    directly.
    """


class IdentityError(WxSensorsError):
    """A sensor identity key could not be parsed."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class DeliveryError(WxSensorsError):
    """A consumer callback failed while delivering a notification.

    Delivery is best-effort: the dispatcher logs this and moves on.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str = "",
        handle: object = None,
    ) -> None:
        self.kind = kind
        self.handle = handle
        super().__init__(message)
