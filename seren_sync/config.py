"""Opciones del forwarder (schema validado con pydantic).

Las claves camelCase son las del schema original del plugin:
    {"positionSampleRate": 1000, "sensorSampleRate": 2000, "stateSampleRate": 500}

Configuración via env vars (``SyncOptions.from_env``):
- SEREN_POSITION_SAMPLE_RATE (default: 1000)
- SEREN_SENSOR_SAMPLE_RATE (default: 2000)
- SEREN_STATE_SAMPLE_RATE (default: 500)
- SEREN_SENSOR_SOCKET / SEREN_POSITION_SOCKET / SEREN_STATE_SOCKET
- SEREN_SERIALIZATION (json | pipe, default: json)
- SEREN_RULES_FILE (opcional)
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .core.domain.category import Category
from .throttling.throttle_gate import FALLBACK_INTERVAL_MS
from .transports.unix_socket.connection_config import DEFAULT_SOCKET_PATHS

MIN_SAMPLE_RATE_MS = 100


class SyncOptions(BaseModel):
    """Opciones de arranque (única configuración del core)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    position_sample_rate: int = Field(
        default=1000,
        ge=MIN_SAMPLE_RATE_MS,
        alias="positionSampleRate",
        description="Minimum interval between position data transmissions per path (ms)",
    )
    sensor_sample_rate: int = Field(
        default=2000,
        ge=MIN_SAMPLE_RATE_MS,
        alias="sensorSampleRate",
        description="Minimum interval between sensor data transmissions per path (ms)",
    )
    state_sample_rate: int = Field(
        default=500,
        ge=MIN_SAMPLE_RATE_MS,
        alias="stateSampleRate",
        description="Minimum interval between state data transmissions per path (ms)",
    )
    sockets: Dict[Category, str] = Field(
        default_factory=lambda: dict(DEFAULT_SOCKET_PATHS),
        description="Category → unix socket path",
    )
    serialization: Literal["json", "pipe"] = "json"
    rules_file: Optional[str] = Field(default=None, alias="rulesFile")

    @field_validator("sockets")
    @classmethod
    def validate_sockets(cls, v: Dict[Category, str]) -> Dict[Category, str]:
        if Category.DUMP in v:
            raise ValueError("'dump' cannot have a socket")
        for category, path in v.items():
            if not path or not path.strip():
                raise ValueError(f"socket path for '{category.value}' is empty")
        return v

    def interval_for(self, category: Category) -> int:
        """Intervalo mínimo (ms) entre transmisiones de un mismo path."""
        if category is Category.POSITION:
            return self.position_sample_rate
        if category is Category.SENSOR:
            return self.sensor_sample_rate
        if category is Category.STATE:
            return self.state_sample_rate
        return FALLBACK_INTERVAL_MS

    @property
    def intervals_ms(self) -> Dict[Category, int]:
        return {category: self.interval_for(category) for category in self.sockets}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SyncOptions":
        """Carga opciones desde un JSON con el schema del plugin."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)

    @classmethod
    def from_env(cls) -> "SyncOptions":
        data: dict = {}
        for key, env in (
            ("positionSampleRate", "SEREN_POSITION_SAMPLE_RATE"),
            ("sensorSampleRate", "SEREN_SENSOR_SAMPLE_RATE"),
            ("stateSampleRate", "SEREN_STATE_SAMPLE_RATE"),
        ):
            value = os.getenv(env)
            if value:
                data[key] = int(value)

        sockets = dict(DEFAULT_SOCKET_PATHS)
        for category in sockets:
            override = os.getenv(f"SEREN_{category.value.upper()}_SOCKET")
            if override:
                sockets[category] = override
        data["sockets"] = sockets

        serialization = os.getenv("SEREN_SERIALIZATION")
        if serialization:
            data["serialization"] = serialization.strip().lower()

        rules_file = os.getenv("SEREN_RULES_FILE")
        if rules_file:
            data["rulesFile"] = rules_file

        return cls.model_validate(data)
