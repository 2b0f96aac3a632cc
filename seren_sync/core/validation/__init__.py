"""Normalización y validación de valores crudos."""

from .timestamps import MILLIS_THRESHOLD, now_millis, to_epoch_millis
from .value_normalizer import (
    NormalizationResult,
    RejectReason,
    ValueNormalizer,
    is_degenerate_position,
)

__all__ = [
    "MILLIS_THRESHOLD",
    "now_millis",
    "to_epoch_millis",
    "NormalizationResult",
    "RejectReason",
    "ValueNormalizer",
    "is_degenerate_position",
]
