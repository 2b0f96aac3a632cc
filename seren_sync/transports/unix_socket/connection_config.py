"""Estados y constantes de las conexiones por categoría.

Extraído de connection.py para mantener el módulo enfocado en la máquina
de estados.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict

from ...core.domain.category import Category


class ConnectionState(str, Enum):
    """Estados de una conexión.

    CONNECTING → CONNECTED → CLOSED → (reconexión) → CONNECTING
    SHUTTING_DOWN es terminal y alcanzable desde cualquier estado.
    """
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"
    SHUTTING_DOWN = "shutting_down"


# Espera fija entre intentos (sin backoff, sin timeout de conexión)
RECONNECT_INTERVAL_SECONDS = 5.0

DEFAULT_SOCKET_PATHS: Dict[Category, str] = {
    Category.SENSOR: "/tmp/signalk_sensors.sock",
    Category.POSITION: "/tmp/signalk_position.sock",
    Category.STATE: "/tmp/signalk_state.sock",
}
