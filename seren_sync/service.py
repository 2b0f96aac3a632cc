"""SyncService - ciclo de vida del forwarder.

start(options):
  1. Construye clasificador, throttle gate y una conexión por categoría
  2. Conecta todas las categorías (cada una reconecta por su cuenta)
  3. Suscribe el router a la fuente de valores

stop() (idempotente):
  flag de apagado → desuscribir → cancelar timers y cerrar conexiones
  → limpiar estado de throttling
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from .config import SyncOptions
from .core.classification.path_classifier import PathClassifier
from .core.classification.rules import load_rules_file
from .core.domain.category import Category
from .pipelines.router import ValueRouter
from .sources.bus import Unsubscribe, ValueSubscription
from .throttling.throttle_gate import ThrottleGate
from .transports.unix_socket.connection import Opener, ReconnectingConnection
from .transports.unix_socket.connection_config import RECONNECT_INTERVAL_SECONDS
from .transports.unix_socket.serializers import get_serializer

logger = logging.getLogger(__name__)


class SyncService:
    """Forwarder categorizado de valores a sockets locales.

    Uso:
        bus = ValueBus()
        service = SyncService(bus)
        service.start(SyncOptions())   # dentro del event loop
        ...
        service.stop()
    """

    def __init__(
        self,
        subscription: ValueSubscription,
        *,
        classifier: Optional[PathClassifier] = None,
        reconnect_delay_seconds: float = RECONNECT_INTERVAL_SECONDS,
        opener: Optional[Opener] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._subscription = subscription
        self._classifier = classifier
        self._reconnect_delay = reconnect_delay_seconds
        self._opener = opener
        self._clock = clock

        self._options: Optional[SyncOptions] = None
        self._router: Optional[ValueRouter] = None
        self._connections: Dict[Category, ReconnectingConnection] = {}
        self._unsubscribe: Optional[Unsubscribe] = None
        self._started = False
        self._shutting_down = False
        self._started_at: float = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutting_down

    @property
    def is_subscribed(self) -> bool:
        return self._unsubscribe is not None

    @property
    def router(self) -> Optional[ValueRouter]:
        return self._router

    @property
    def connections(self) -> Dict[Category, ReconnectingConnection]:
        return self._connections

    @property
    def options(self) -> Optional[SyncOptions]:
        return self._options

    def _build_classifier(self, options: SyncOptions) -> PathClassifier:
        if self._classifier is not None:
            return self._classifier
        if options.rules_file:
            return PathClassifier(load_rules_file(options.rules_file))
        return PathClassifier()

    def start(self, options: Optional[SyncOptions] = None) -> None:
        """Arranca conexiones y suscripción (requiere event loop activo)."""
        if self._started:
            logger.warning("[SERVICE] Already started, ignoring start()")
            return

        logger.debug("[SERVICE] Starting categorized data forwarder")
        self._options = options or SyncOptions()
        classifier = self._build_classifier(self._options)
        serializer = get_serializer(self._options.serialization)

        self._connections = {
            category: ReconnectingConnection(
                category.value,
                endpoint,
                reconnect_delay_seconds=self._reconnect_delay,
                serializer=serializer,
                opener=self._opener,
            )
            for category, endpoint in self._options.sockets.items()
        }

        router_kwargs = {}
        if self._clock is not None:
            router_kwargs["clock"] = self._clock
        self._router = ValueRouter(
            classifier,
            ThrottleGate(self._options.intervals_ms),
            self._connections,
            **router_kwargs,
        )

        self._started = True
        self._started_at = time.time()

        for connection in self._connections.values():
            connection.connect()

        self._subscribe()

        logger.info(
            "[SERVICE] Started: categories=%s format=%s intervals_ms=%s",
            ",".join(c.value for c in self._connections),
            serializer.name,
            {c.value: ms for c, ms in self._options.intervals_ms.items()},
        )

    def _subscribe(self) -> None:
        try:
            self._unsubscribe = self._subscription.subscribe(self._router.on_value)
            logger.debug("[SERVICE] Successfully subscribed to value stream")
        except Exception as e:
            # Problema de configuración de arranque: el servicio queda inerte
            self._unsubscribe = None
            logger.error("[SERVICE] Failed to subscribe to value stream: %s", e)

    def stop(self) -> None:
        """Detiene el forwarder (idempotente)."""
        if not self._started or self._shutting_down:
            return
        logger.debug("[SERVICE] Stopping categorized data forwarder")
        self._shutting_down = True

        if self._unsubscribe is not None:
            try:
                self._unsubscribe()
                logger.debug("[SERVICE] Unsubscribed from value stream")
            except Exception as e:
                logger.warning("[SERVICE] Error unsubscribing: %s", e)
            self._unsubscribe = None

        if self._router is not None:
            self._router.shutdown()

        router_stats = self._router.stats if self._router else {}
        logger.info(
            "[SERVICE] Stopped. Stats: received=%s forwarded=%s",
            router_stats.get("received"),
            router_stats.get("forwarded"),
        )

    @property
    def stats(self) -> dict:
        return {
            "running": self.is_running,
            "subscribed": self.is_subscribed,
            "started_at": self._started_at,
            "router": self._router.stats if self._router else None,
            "connections": {c.value: conn.stats for c, conn in self._connections.items()},
        }

    def health_check(self) -> dict:
        connected = [c.value for c, conn in self._connections.items() if conn.is_connected]
        return {
            "healthy": self.is_running and self.is_subscribed and bool(connected),
            "running": self.is_running,
            "subscribed": self.is_subscribed,
            "connected": connected,
            "disconnected": [
                c.value for c, conn in self._connections.items() if not conn.is_connected
            ],
        }
