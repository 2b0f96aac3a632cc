"""Excepciones del dominio."""

from __future__ import annotations


class RuleConfigError(ValueError):
    """Reglas de clasificación inválidas (categoría desconocida o regex rota)."""

    def __init__(self, category: str, detail: str):
        self.category = category
        super().__init__(f"Invalid classification rules for '{category}': {detail}")


class SerializationError(Exception):
    """Un Measurement no pudo serializarse al formato de cable."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot serialize measurement for path '{path}': {cause}")
