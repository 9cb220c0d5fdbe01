"""State layer.

This package is the single source of truth for the latest known reading of
every sensor seen during the process lifetime, and for which of those
sensors are paired with a consumer.
"""
