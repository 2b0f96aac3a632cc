"""Clasificación de paths por reglas."""

from .path_classifier import PathClassifier
from .rules import (
    ClassificationRule,
    DEFAULT_RULES,
    build_rules,
    load_rules_file,
)

__all__ = [
    "PathClassifier",
    "ClassificationRule",
    "DEFAULT_RULES",
    "build_rules",
    "load_rules_file",
]
