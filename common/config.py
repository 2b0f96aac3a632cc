from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env en el directorio de trabajo, como cualquier servicio del host.
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    log_level: str

    options_file: Optional[str]
    rules_file: Optional[str]
    serialization: Optional[str]

    http_host: str
    http_port: Optional[int]


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("SEREN_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    http_port = _optional("SEREN_HTTP_PORT")

    return Settings(
        log_level=os.getenv("SEREN_LOG_LEVEL", "INFO").upper(),
        options_file=_optional("SEREN_OPTIONS_FILE"),
        rules_file=_optional("SEREN_RULES_FILE"),
        serialization=_optional("SEREN_SERIALIZATION"),
        http_host=os.getenv("SEREN_HTTP_HOST", "127.0.0.1"),
        http_port=int(http_port) if http_port else None,
    )
