"""Measurement - registro canónico que viaja por los sockets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Measurement:
    """Medición normalizada lista para serializar.

    Una por evento reenviado. ``time`` es epoch en milisegundos.
    """

    path: str
    time: int
    value: Any
    source: str

    def to_dict(self) -> Dict[str, Any]:
        """Formato de cable JSON (el orden de claves es parte del contrato)."""
        return {
            "path": self.path,
            "time": self.time,
            "value": self.value,
            "source": self.source,
        }
