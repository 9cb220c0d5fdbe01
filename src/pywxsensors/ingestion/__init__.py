"""Ingestion layer.

This package contains adapters that receive decoder output (MQTT today)
and turn it into raw readings for :meth:`pywxsensors.hub.SensorHub.submit_reading`.
"""

__all__: list[str] = []
