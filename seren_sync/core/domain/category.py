"""Category - destinos de reenvío asignados por el clasificador."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """Categorías de reenvío.

    El orden de definición ES el orden de evaluación del clasificador
    (después de DUMP, que siempre se evalúa primero):
    - STATE: estados, modos, nombres, acumulados
    - POSITION: fix de posición
    - SENSOR: magnitudes físicas continuas
    - DUMP: pseudo-categoría de descarte (nunca se reenvía)
    """

    STATE = "state"
    POSITION = "position"
    SENSOR = "sensor"
    DUMP = "dump"

    @property
    def is_discard(self) -> bool:
        return self is Category.DUMP


# Categorías reales en orden de evaluación
REAL_CATEGORIES = tuple(c for c in Category if c is not Category.DUMP)
