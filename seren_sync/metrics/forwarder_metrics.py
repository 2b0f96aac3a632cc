"""Métricas Prometheus del pipeline y de las conexiones.

Se exponen en GET /metrics (ver endpoints/health.py).
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

VALUES_RECEIVED = Counter(
    "seren_sync_values_received_total",
    "Total raw values received from the value stream",
)

VALUES_DROPPED = Counter(
    "seren_sync_values_dropped_total",
    "Raw values dropped before reaching a connection",
    ["reason"],  # dump, throttled, invalid, degenerate_position, error
)

VALUES_FORWARDED = Counter(
    "seren_sync_values_forwarded_total",
    "Measurements handed to a category connection",
    ["category"],
)

WRITES_DROPPED = Counter(
    "seren_sync_writes_dropped_total",
    "Measurements dropped by a connection",
    ["category", "reason"],  # not_connected, serialization, io_error
)

RECONNECTS = Counter(
    "seren_sync_reconnects_total",
    "Reconnection attempts per category",
    ["category"],
)

CONNECTION_STATE = Gauge(
    "seren_sync_connection_connected",
    "1 if the category socket is connected, 0 otherwise",
    ["category"],
)
