"""ValueBus - suscripción push en proceso.

Contrato de la frontera de ingesta: ``subscribe(callback) -> unsubscribe``.
La entrega es síncrona: cada callback corre hasta completar antes de
entregar el siguiente valor.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

from ..core.domain.raw_value import RawValue

logger = logging.getLogger(__name__)

ValueCallback = Callable[[RawValue], object]
Unsubscribe = Callable[[], None]


class ValueSubscription(Protocol):
    """Capacidad de suscripción a valores."""

    def subscribe(self, callback: ValueCallback) -> Unsubscribe:
        ...


class ValueBus:
    """Bus de valores en memoria.

    - Un productor (lector de stdin, adaptador, tests) publica valores.
    - Los handlers reciben cada valor en orden, de a uno.
    - ``publish_threadsafe`` permite publicar desde otros hilos: el valor
      se encola en el event loop, así los handlers nunca corren en paralelo.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._handlers: List[ValueCallback] = []
        self._loop = loop
        self._published = 0

    def subscribe(self, callback: ValueCallback) -> Unsubscribe:
        self._handlers.append(callback)
        logger.debug("[BUS] Handler subscribed (total=%d)", len(self._handlers))

        def _unsubscribe() -> None:
            self.off(callback)

        return _unsubscribe

    def off(self, callback: ValueCallback) -> None:
        try:
            self._handlers.remove(callback)
        except ValueError:
            return
        logger.debug("[BUS] Handler unsubscribed (total=%d)", len(self._handlers))

    def publish(self, value: RawValue) -> None:
        """Entrega un valor a todos los handlers, síncronamente."""
        self._published += 1
        for handler in list(self._handlers):
            try:
                handler(value)
            except Exception as e:
                logger.exception("[BUS] Handler failed for path=%s: %s", value.path, e)

    def publish_threadsafe(self, value: RawValue) -> None:
        """Publica desde un hilo ajeno al event loop."""
        loop = self._loop
        if loop is None:
            raise RuntimeError("ValueBus has no event loop bound for thread-safe publish")
        loop.call_soon_threadsafe(self.publish, value)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    @property
    def published(self) -> int:
        return self._published
