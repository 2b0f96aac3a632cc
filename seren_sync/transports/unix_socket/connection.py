"""ReconnectingConnection - conexión persistente por categoría.

Una instancia por categoría; las instancias no comparten estado, así que
una tormenta de reconexiones en una no afecta a las demás.

Máquina de estados:
- connect(): abre el endpoint (no-op si ya hay un intento en vuelo o si
  se está apagando)
- error de conexión → se loguea; NO reprograma (lo hace el cierre)
- cierre (con o sin error) → CLOSED y schedule_reconnect()
- schedule_reconnect(): a lo sumo UN timer pendiente
- write(): solo si CONNECTED; si no, se descarta (sin cola, sin retry)
- shutdown(): idempotente; cancela timer, aborta transporte

Todo corre en el event loop: callbacks y timers nunca se ejecutan en
paralelo para una misma instancia.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Tuple

from ...core.domain.errors import SerializationError
from ...core.domain.measurement import Measurement
from ...metrics.forwarder_metrics import CONNECTION_STATE, RECONNECTS, WRITES_DROPPED
from .connection_config import RECONNECT_INTERVAL_SECONDS, ConnectionState
from .serializers import JsonLineSerializer, RecordSerializer

logger = logging.getLogger(__name__)

Opener = Callable[[str], Awaitable[Tuple[asyncio.StreamReader, asyncio.StreamWriter]]]

_READ_CHUNK = 4096


async def open_unix_endpoint(
    endpoint: str,
) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Abre un socket de dominio Unix."""
    return await asyncio.open_unix_connection(path=endpoint)


class ReconnectingConnection:
    """Conexión saliente con reconexión automática a intervalo fijo.

    Uso:
        conn = ReconnectingConnection("sensor", "/tmp/signalk_sensors.sock")
        conn.connect()          # dentro del event loop
        conn.write(measurement)
        conn.shutdown()
    """

    def __init__(
        self,
        name: str,
        endpoint: str,
        *,
        reconnect_delay_seconds: float = RECONNECT_INTERVAL_SECONDS,
        serializer: Optional[RecordSerializer] = None,
        opener: Optional[Opener] = None,
    ):
        self.name = name
        self.endpoint = endpoint
        self._reconnect_delay = float(reconnect_delay_seconds)
        self._serializer = serializer or JsonLineSerializer()
        self._opener = opener or open_unix_endpoint

        self._state = ConnectionState.CLOSED
        self._shutting_down = False
        self._writer: Optional[asyncio.StreamWriter] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._reconnect_timer: Optional[asyncio.TimerHandle] = None

        # Stats
        self._connect_attempts = 0
        self._reconnect_count = 0
        self._records_written = 0
        self._records_dropped = 0
        self._last_error: Optional[str] = None
        self._connected_at: float = 0

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_timer is not None

    @property
    def is_writable(self) -> bool:
        writer = self._writer
        return (
            self._state is ConnectionState.CONNECTED
            and writer is not None
            and not writer.is_closing()
        )

    def _set_state(self, state: ConnectionState) -> None:
        self._state = state
        CONNECTION_STATE.labels(category=self.name).set(
            1 if state is ConnectionState.CONNECTED else 0
        )

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Inicia un intento de conexión (requiere event loop en ejecución)."""
        if self._shutting_down:
            return
        if self._connect_task is not None and not self._connect_task.done():
            logger.debug("[CONN:%s] Connection attempt already in flight", self.name)
            return

        loop = asyncio.get_running_loop()
        self._connect_attempts += 1
        self._set_state(ConnectionState.CONNECTING)
        logger.debug("[CONN:%s] Attempting to connect to %s", self.name, self.endpoint)
        self._connect_task = loop.create_task(
            self._run(), name=f"seren-sync:{self.name}"
        )

    async def _run(self) -> None:
        """Intento de conexión + vigilancia hasta el cierre."""
        try:
            reader, writer = await self._opener(self.endpoint)
        except asyncio.CancelledError:
            raise
        except OSError as e:
            self._on_error(e)
            self._on_close(had_error=True)
            return

        if self._shutting_down:
            writer.transport.abort()
            return

        self._writer = writer
        self._connected_at = time.time()
        self._set_state(ConnectionState.CONNECTED)
        logger.info("[CONN:%s] Connected to %s", self.name, self.endpoint)

        had_error = False
        try:
            # El consumidor no envía datos: leer solo sirve para detectar el cierre
            while await reader.read(_READ_CHUNK):
                pass
        except asyncio.CancelledError:
            self._release_writer()
            raise
        except OSError as e:
            had_error = True
            self._on_error(e)

        self._release_writer()
        self._on_close(had_error=had_error)

    def _on_error(self, error: BaseException) -> None:
        self._last_error = f"{type(error).__name__}: {error}"
        logger.error("[CONN:%s] Socket connection error: %s", self.name, error)

    def _on_close(self, had_error: bool) -> None:
        """Único punto que programa reconexiones."""
        self._writer = None
        if self._shutting_down:
            return

        self._set_state(ConnectionState.CLOSED)
        logger.debug("[CONN:%s] Connection closed. had_error=%s", self.name, had_error)
        self.schedule_reconnect()

    def _release_writer(self) -> None:
        writer, self._writer = self._writer, None
        if writer is not None and not writer.is_closing():
            writer.close()

    def schedule_reconnect(self) -> bool:
        """Programa UN reintento tras el intervalo fijo.

        Returns:
            True si se armó un timer nuevo
        """
        if self._shutting_down or self._reconnect_timer is not None:
            return False

        loop = asyncio.get_running_loop()
        logger.debug(
            "[CONN:%s] Scheduling reconnection in %.1fs",
            self.name,
            self._reconnect_delay,
        )
        self._reconnect_timer = loop.call_later(
            self._reconnect_delay, self._on_reconnect_timer
        )
        return True

    def _on_reconnect_timer(self) -> None:
        self._reconnect_timer = None
        if self._shutting_down:
            return
        self._reconnect_count += 1
        RECONNECTS.labels(category=self.name).inc()
        logger.debug("[CONN:%s] Attempting to reconnect", self.name)
        self.connect()

    def shutdown(self) -> None:
        """Apaga la conexión de forma definitiva (idempotente)."""
        if self._shutting_down:
            return
        self._shutting_down = True
        self._set_state(ConnectionState.SHUTTING_DOWN)

        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

        writer, self._writer = self._writer, None
        if writer is not None:
            writer.transport.abort()

        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()

        logger.debug("[CONN:%s] Socket connection closed (shutdown)", self.name)

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------

    def write(self, measurement: Measurement) -> bool:
        """Serializa y escribe un Measurement, best-effort.

        Returns:
            True si se entregó al transporte
        """
        if not self.is_writable:
            logger.debug(
                "[CONN:%s] Socket not available, skipping path=%s",
                self.name,
                measurement.path,
            )
            self._records_dropped += 1
            WRITES_DROPPED.labels(category=self.name, reason="not_connected").inc()
            return False

        try:
            line = self._serializer.serialize(measurement)
        except SerializationError as e:
            logger.error("[CONN:%s] Error serializing data: %s", self.name, e)
            self._records_dropped += 1
            WRITES_DROPPED.labels(category=self.name, reason="serialization").inc()
            return False

        try:
            self._writer.write(line.encode("utf-8"))
        except (OSError, RuntimeError) as e:
            logger.error("[CONN:%s] Error writing to socket: %s", self.name, e)
            self._records_dropped += 1
            WRITES_DROPPED.labels(category=self.name, reason="io_error").inc()
            return False

        self._records_written += 1
        logger.debug("[CONN:%s] Writing to socket: %s", self.name, line.rstrip("\n"))
        return True

    # ------------------------------------------------------------------
    # Observabilidad
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        return {
            "category": self.name,
            "endpoint": self.endpoint,
            "state": self._state.value,
            "format": self._serializer.name,
            "connect_attempts": self._connect_attempts,
            "reconnect_count": self._reconnect_count,
            "reconnect_pending": self.reconnect_pending,
            "records_written": self._records_written,
            "records_dropped": self._records_dropped,
            "last_error": self._last_error,
            "connected_at": self._connected_at,
        }
