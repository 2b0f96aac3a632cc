"""Expansión de deltas Signal K a RawValues.

Un delta agrupa valores por update:

    {
        "context": "vessels.self",
        "updates": [
            {
                "$source": "gps.0",
                "timestamp": "2023-09-11T18:48:43.456Z",
                "values": [
                    {"path": "navigation.speedOverGround", "value": 5.1}
                ]
            }
        ]
    }

Cada entrada de ``values`` produce un RawValue con el timestamp y la
procedencia de su update. Un objeto plano ``{path, value, timestamp}``
pasa tal cual.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

from ..core.domain.raw_value import MISSING, RawValue

logger = logging.getLogger(__name__)


def _source_label(update: Mapping[str, Any]) -> Any:
    """``$source`` si existe; si no, arma ``label.src`` desde ``source``."""
    ref = update.get("$source")
    if isinstance(ref, str) and ref:
        return ref
    source = update.get("source")
    if isinstance(source, Mapping):
        label = source.get("label")
        src = source.get("src") or source.get("talker")
        if label and src:
            return f"{label}.{src}"
        return label or None
    if isinstance(source, str):
        return source
    return None


def expand_delta(message: Mapping[str, Any]) -> Iterator[RawValue]:
    """Convierte un mensaje (delta u objeto de valor) en RawValues."""
    updates = message.get("updates")
    if updates is None:
        yield RawValue.from_dict(message)
        return

    if not isinstance(updates, list):
        logger.warning("[SIGNALK] Ignoring delta with non-list updates")
        return

    for update in updates:
        if not isinstance(update, Mapping):
            continue
        values = update.get("values")
        if not isinstance(values, list):
            continue
        source = _source_label(update)
        timestamp = update.get("timestamp")
        for entry in values:
            if not isinstance(entry, Mapping):
                continue
            yield RawValue(
                path=entry.get("path"),
                value=entry.get("value", MISSING),
                timestamp=timestamp,
                source=source,
            )
