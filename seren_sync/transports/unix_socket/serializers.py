"""Formatos de cable para Measurements.

Cada registro es UNA línea terminada en ``\\n``.

JSON (default):
    {"path":"navigation.speedOverGround","time":1694458123000,"value":5.1,"source":"gps.0"}

PIPE (compacto): ``timestamp_ms|path|source|value``
    1694458123456|navigation.speedOverGround|gps.0|12.3
    1694458123457|environment.outside.temperature|onewire.28FF123456|285.15
    1694458123458|notifications.navigation.gnss|nmea.0|{"state":"normal","message":"GPS fix OK"}

- ``|`` dentro de source o de un value string se escapa como ``\\|``
- objetos/listas van como JSON compacto
- el resto de escalares se stringifican (true/false/null, 5 en vez de 5.0)
"""

from __future__ import annotations

import json
import math
from typing import Any, Protocol

from ...core.domain.errors import SerializationError
from ...core.domain.measurement import Measurement


class RecordSerializer(Protocol):
    """Interfaz de serialización de una línea."""

    name: str

    def serialize(self, measurement: Measurement) -> str:
        """Retorna la línea (con ``\\n``). Raises SerializationError."""
        ...


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


class JsonLineSerializer:
    """``{path, time, value, source}`` como JSON compacto por línea."""

    name = "json"

    def serialize(self, measurement: Measurement) -> str:
        try:
            return _compact_json(measurement.to_dict()) + "\n"
        except (TypeError, ValueError) as e:
            raise SerializationError(measurement.path, e) from e


def _escape_pipes(text: str) -> str:
    return text.replace("|", "\\|")


def _stringify_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


class PipeLineSerializer:
    """Formato compacto ``timestamp_ms|path|source|value``."""

    name = "pipe"

    def serialize(self, measurement: Measurement) -> str:
        value = measurement.value
        try:
            if isinstance(value, (dict, list, tuple)):
                serialized_value = _compact_json(value)
            elif isinstance(value, str):
                serialized_value = _escape_pipes(value)
            else:
                serialized_value = _stringify_scalar(value)
        except (TypeError, ValueError) as e:
            raise SerializationError(measurement.path, e) from e

        source = _escape_pipes(measurement.source or "unknown")
        return f"{measurement.time}|{measurement.path}|{source}|{serialized_value}\n"


_SERIALIZERS = {
    JsonLineSerializer.name: JsonLineSerializer,
    PipeLineSerializer.name: PipeLineSerializer,
}


def get_serializer(name: str = "json") -> RecordSerializer:
    """Obtiene el serializer por nombre (``json`` | ``pipe``)."""
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown serialization format '{name}'. "
            f"Expected one of: {', '.join(sorted(_SERIALIZERS))}"
        ) from None
