"""ValueNormalizer - RawValue → Measurement o rechazo.

Pasos:
1. Validez: path, value y timestamp presentes
2. Timestamp → epoch ms (fallback a "ahora", nunca rechazo)
3. Source: ``$source`` o "unknown"
4. Posición degenerada: latitude/longitude == 0 en POSITION → rechazo

Los rechazos se loguean en DEBUG y nunca se propagan.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ..domain.category import Category
from ..domain.measurement import Measurement
from ..domain.raw_value import MISSING, RawValue
from .timestamps import now_millis, to_epoch_millis

logger = logging.getLogger(__name__)


class RejectReason(str, Enum):
    """Motivos de descarte de un valor."""
    MISSING_PATH = "missing_path"
    MISSING_VALUE = "missing_value"
    MISSING_TIMESTAMP = "missing_timestamp"
    DEGENERATE_POSITION = "degenerate_position"


@dataclass(frozen=True)
class NormalizationResult:
    """Resultado de normalización."""

    measurement: Optional[Measurement] = None
    reason: Optional[RejectReason] = None

    @property
    def accepted(self) -> bool:
        return self.measurement is not None


def _coerce_number(value: Any) -> float:
    """Coerción numérica laxa: null, "", false y "0" valen 0; lo demás NaN."""
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def is_degenerate_position(category: Category, value: Any) -> bool:
    """True si es un fix sin inicializar (lat o lon exactamente cero).

    Solo aplica a POSITION con valor estructurado. Una clave ausente
    no cuenta como cero.
    """
    if category is not Category.POSITION or not isinstance(value, Mapping):
        return False
    latitude = _coerce_number(value.get("latitude", MISSING))
    longitude = _coerce_number(value.get("longitude", MISSING))
    return latitude == 0 or longitude == 0


def _missing_timestamp(timestamp: Any) -> bool:
    if timestamp is None:
        return True
    if isinstance(timestamp, str):
        return timestamp == ""
    if isinstance(timestamp, (int, float)):
        return timestamp == 0
    return False


class ValueNormalizer:
    """Normalizador puro (salvo el reloj de fallback, inyectable)."""

    def __init__(self, clock: Callable[[], int] = now_millis):
        self._clock = clock

    def validate(self, raw: RawValue) -> Optional[RejectReason]:
        """Paso 1: retorna el motivo de rechazo, o None si es válido."""
        if not raw.path or not isinstance(raw.path, str):
            return RejectReason.MISSING_PATH
        if not raw.has_value:
            return RejectReason.MISSING_VALUE
        if _missing_timestamp(raw.timestamp):
            return RejectReason.MISSING_TIMESTAMP
        return None

    def normalize(
        self,
        raw: RawValue,
        category: Category,
    ) -> NormalizationResult:
        reason = self.validate(raw)
        if reason is None and is_degenerate_position(category, raw.value):
            reason = RejectReason.DEGENERATE_POSITION

        if reason is not None:
            logger.debug("[NORMALIZER] Rejected path=%s reason=%s", raw.path, reason.value)
            return NormalizationResult(reason=reason)

        return NormalizationResult(
            measurement=Measurement(
                path=raw.path,
                time=to_epoch_millis(raw.timestamp, clock=self._clock),
                value=raw.value,
                source=raw.source_label,
            )
        )
