"""Modelos de dominio del forwarder."""

from .category import Category, REAL_CATEGORIES
from .errors import RuleConfigError, SerializationError
from .measurement import Measurement
from .raw_value import MISSING, RawValue

__all__ = [
    "Category",
    "REAL_CATEGORIES",
    "Measurement",
    "MISSING",
    "RawValue",
    "RuleConfigError",
    "SerializationError",
]
