"""RawValue - valor tal como lo entrega la suscripción externa."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


class _Missing:
    """Marca de campo ausente (distinto de ``None``, que es JSON null)."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

DEFAULT_SOURCE = "unknown"


@dataclass(frozen=True)
class RawValue:
    """Valor crudo recibido del stream.

    Campos:
    - path: identificador punteado (``navigation.speedOverGround``)
    - value: escalar o estructura; MISSING si el evento no lo trae
    - timestamp: string ISO-8601 o número (segundos o milisegundos)
    - source: procedencia (``$source``); None si no viene
    """

    path: Optional[str]
    value: Any = MISSING
    timestamp: Any = None
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawValue":
        """Construye desde un objeto de valor (``{path, value, timestamp, $source}``).

        Acepta ``$source`` o ``source`` para la procedencia.
        """
        source = data.get("$source")
        if source is None:
            source = data.get("source")
        return cls(
            path=data.get("path"),
            value=data.get("value", MISSING),
            timestamp=data.get("timestamp"),
            source=source if isinstance(source, str) else None,
        )

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    @property
    def source_label(self) -> str:
        return self.source or DEFAULT_SOURCE
