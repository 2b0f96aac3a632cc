"""Normalización de timestamps a epoch en milisegundos.

Heurística de unidades: un número > 1e12 ya está en milisegundos,
uno <= 1e12 está en segundos. Cualquier forma no reconocida o string
no parseable cae al reloj actual (NO se rechaza el registro).
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

MILLIS_THRESHOLD = 1e12

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def now_millis() -> int:
    """Reloj de pared en epoch ms."""
    return int(time.time() * 1000)


def _parse_iso(text: str) -> Optional[int]:
    try:
        dt = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    # ms exactos (aritmética entera de timedelta)
    return (dt - _EPOCH) // _ONE_MS


def to_epoch_millis(
    timestamp: Any,
    clock: Callable[[], int] = now_millis,
) -> int:
    """Convierte un timestamp crudo a epoch ms.

    Args:
        timestamp: string ISO-8601, o número en segundos / milisegundos
        clock: reloj de fallback

    Returns:
        Epoch en milisegundos (entero)
    """
    if isinstance(timestamp, str):
        parsed = _parse_iso(timestamp)
        if parsed is not None:
            return parsed
        logger.debug("[TIMESTAMP] Unparseable timestamp %r, using now", timestamp)
        return clock()

    # bool es subclase de int: no es un timestamp válido
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        if not math.isfinite(timestamp):
            logger.debug("[TIMESTAMP] Non-finite timestamp %r, using now", timestamp)
            return clock()
        if timestamp > MILLIS_THRESHOLD:
            return math.floor(timestamp)
        return math.floor(timestamp * 1000)

    logger.debug(
        "[TIMESTAMP] Unsupported timestamp type %s, using now",
        type(timestamp).__name__,
    )
    return clock()
