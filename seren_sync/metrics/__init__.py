"""Métricas Prometheus del forwarder."""

from .forwarder_metrics import (
    CONNECTION_STATE,
    RECONNECTS,
    VALUES_DROPPED,
    VALUES_FORWARDED,
    VALUES_RECEIVED,
    WRITES_DROPPED,
)

__all__ = [
    "CONNECTION_STATE",
    "RECONNECTS",
    "VALUES_DROPPED",
    "VALUES_FORWARDED",
    "VALUES_RECEIVED",
    "WRITES_DROPPED",
]
