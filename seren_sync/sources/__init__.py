"""Fuentes de valores (frontera de ingesta)."""

from .bus import ValueBus, ValueSubscription
from .ndjson import pump_ndjson
from .signalk import expand_delta

__all__ = ["ValueBus", "ValueSubscription", "pump_ndjson", "expand_delta"]
