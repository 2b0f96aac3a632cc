"""Router central que clasifica, filtra, limita y enruta valores.

Pipeline por valor (síncrono, hasta completar antes del siguiente):
1. PathClassifier → DUMP / no clasificado se descarta
2. Posición degenerada (sobre el valor crudo) se descarta
3. ThrottleGate con el intervalo de la categoría
4. ValueNormalizer → Measurement
5. Registrar timestamp de transmisión del path
6. write() a la conexión de la categoría

Nunca propaga excepciones a la suscripción que lo invoca.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Protocol

from ..core.classification.path_classifier import PathClassifier
from ..core.domain.category import Category
from ..core.domain.measurement import Measurement
from ..core.domain.raw_value import RawValue
from ..core.validation.timestamps import now_millis
from ..core.validation.value_normalizer import ValueNormalizer, is_degenerate_position
from ..metrics.forwarder_metrics import VALUES_DROPPED, VALUES_FORWARDED, VALUES_RECEIVED
from ..throttling.throttle_gate import ThrottleGate

logger = logging.getLogger(__name__)


class MeasurementSink(Protocol):
    """Destino de una categoría (ReconnectingConnection en producción)."""

    def write(self, measurement: Measurement) -> bool:
        ...

    def shutdown(self) -> None:
        ...


class DropReason(str, Enum):
    """Motivo por el que un valor no llegó a una conexión."""
    DUMP = "dump"
    NO_CONNECTION = "no_connection"
    DEGENERATE_POSITION = "degenerate_position"
    THROTTLED = "throttled"
    INVALID = "invalid"
    ERROR = "error"


class ValueRouter:
    """Orquesta clasificación → filtros → throttling → normalización → envío.

    Es dueño de UN ThrottleGate y del mapa Category → conexión.
    """

    def __init__(
        self,
        classifier: PathClassifier,
        throttle: ThrottleGate,
        connections: Mapping[Category, MeasurementSink],
        *,
        normalizer: Optional[ValueNormalizer] = None,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self._classifier = classifier
        self._throttle = throttle
        self._connections: Dict[Category, MeasurementSink] = dict(connections)
        self._clock = clock
        self._normalizer = normalizer or ValueNormalizer(clock=clock)

        # Stats
        self._received = 0
        self._forwarded = 0
        self._dropped: Dict[DropReason, int] = {reason: 0 for reason in DropReason}

    @property
    def connections(self) -> Mapping[Category, MeasurementSink]:
        return self._connections

    @property
    def throttle(self) -> ThrottleGate:
        return self._throttle

    def _drop(self, reason: DropReason) -> None:
        self._dropped[reason] += 1
        VALUES_DROPPED.labels(reason=reason.value).inc()

    def on_value(self, raw: RawValue) -> Optional[Measurement]:
        """Callback único registrado en la suscripción de valores.

        Returns:
            El Measurement entregado a la conexión, o None si se descartó
        """
        self._received += 1
        VALUES_RECEIVED.inc()
        try:
            return self._route(raw)
        except Exception as e:
            logger.exception("[ROUTER] Error processing value object: %s", e)
            self._drop(DropReason.ERROR)
            return None

    def _route(self, raw: RawValue) -> Optional[Measurement]:
        path = raw.path if isinstance(raw.path, str) else ""
        category = self._classifier.classify(path)
        if category.is_discard:
            logger.debug("[ROUTER] Discarding dump category data for path: %s", path)
            self._drop(DropReason.DUMP)
            return None

        connection = self._connections.get(category)
        if connection is None:
            logger.debug("[ROUTER] No connection configured for category %s", category.value)
            self._drop(DropReason.NO_CONNECTION)
            return None

        if is_degenerate_position(category, raw.value):
            logger.debug("[ROUTER] Discarding position with zero lat/lon path=%s", path)
            self._drop(DropReason.DEGENERATE_POSITION)
            return None

        now = self._clock()
        if not self._throttle.should_transmit(path, category, now):
            self._drop(DropReason.THROTTLED)
            return None

        result = self._normalizer.normalize(raw, category)
        if not result.accepted:
            self._drop(DropReason.INVALID)
            return None

        self._throttle.record(path, now)

        measurement = result.measurement
        connection.write(measurement)
        self._forwarded += 1
        VALUES_FORWARDED.labels(category=category.value).inc()
        return measurement

    def shutdown(self) -> None:
        """Apaga todas las conexiones y limpia el estado de throttling."""
        for category, connection in self._connections.items():
            try:
                connection.shutdown()
            except Exception as e:
                logger.warning("[ROUTER] Error shutting down %s: %s", category.value, e)
        cleared = self._throttle.clear()
        logger.debug("[ROUTER] Cleared throttle state for %d paths", cleared)

    @property
    def stats(self) -> dict:
        return {
            "received": self._received,
            "forwarded": self._forwarded,
            "dropped": {reason.value: count for reason, count in self._dropped.items()},
            "throttle": self._throttle.get_stats(),
        }
