"""ThrottleGate - limita la frecuencia de transmisión por path.

Un path se transmite si pasó al menos el intervalo de SU categoría
desde la última transmisión de ese mismo path:

    allowed = now - last(path) >= interval(category)

``last`` vale 0 para paths nunca vistos. El mapa crece con la cardinalidad
de paths y no se purga mientras el servicio está activo: purgar cambiaría
el throttling de paths que reaparecen.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Mapping, Optional

from ..core.domain.category import Category

logger = logging.getLogger(__name__)

DEFAULT_INTERVALS_MS: Dict[Category, int] = {
    Category.POSITION: 1000,
    Category.SENSOR: 2000,
    Category.STATE: 500,
}

FALLBACK_INTERVAL_MS = 1000


class ThrottleGate:
    """Gate de throttling con clave path, compartido entre categorías.

    Thread-safe: check y record se serializan con un lock, y
    ``try_transmit`` hace ambos de forma atómica.
    """

    def __init__(self, intervals_ms: Optional[Mapping[Category, int]] = None):
        self._intervals: Dict[Category, int] = dict(DEFAULT_INTERVALS_MS)
        if intervals_ms:
            self._intervals.update(intervals_ms)
        self._last_transmission: Dict[str, int] = {}
        self._lock = Lock()

    def interval_for(self, category: Category) -> int:
        return self._intervals.get(category, FALLBACK_INTERVAL_MS)

    def _allowed(self, path: str, category: Category, now_ms: int) -> bool:
        last = self._last_transmission.get(path, 0)
        return now_ms - last >= self.interval_for(category)

    def _record(self, path: str, now_ms: int) -> None:
        # Nunca retroceder: el valor por path es monótono no decreciente
        if now_ms > self._last_transmission.get(path, 0):
            self._last_transmission[path] = now_ms

    def should_transmit(self, path: str, category: Category, now_ms: int) -> bool:
        with self._lock:
            return self._allowed(path, category, now_ms)

    def record(self, path: str, now_ms: int) -> None:
        with self._lock:
            self._record(path, now_ms)

    def try_transmit(self, path: str, category: Category, now_ms: int) -> bool:
        """Check + record atómico (para hosts multi-hilo)."""
        with self._lock:
            if not self._allowed(path, category, now_ms):
                return False
            self._record(path, now_ms)
            return True

    def last_transmission(self, path: str) -> int:
        with self._lock:
            return self._last_transmission.get(path, 0)

    def clear(self) -> int:
        """Limpia el estado (solo al detener el servicio).

        Returns:
            Número de paths eliminados
        """
        with self._lock:
            count = len(self._last_transmission)
            self._last_transmission.clear()
            return count

    @property
    def tracked_paths(self) -> int:
        with self._lock:
            return len(self._last_transmission)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "tracked_paths": len(self._last_transmission),
                "intervals_ms": {c.value: ms for c, ms in self._intervals.items()},
            }
