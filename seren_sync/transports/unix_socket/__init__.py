"""Conexiones a sockets de dominio Unix con reconexión automática."""

from .connection import ReconnectingConnection, open_unix_endpoint
from .connection_config import (
    DEFAULT_SOCKET_PATHS,
    RECONNECT_INTERVAL_SECONDS,
    ConnectionState,
)
from .serializers import (
    JsonLineSerializer,
    PipeLineSerializer,
    RecordSerializer,
    get_serializer,
)

__all__ = [
    "ReconnectingConnection",
    "open_unix_endpoint",
    "DEFAULT_SOCKET_PATHS",
    "RECONNECT_INTERVAL_SECONDS",
    "ConnectionState",
    "JsonLineSerializer",
    "PipeLineSerializer",
    "RecordSerializer",
    "get_serializer",
]
