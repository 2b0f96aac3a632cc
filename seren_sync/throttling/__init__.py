"""Throttling por path."""

from .throttle_gate import DEFAULT_INTERVALS_MS, FALLBACK_INTERVAL_MS, ThrottleGate

__all__ = ["DEFAULT_INTERVALS_MS", "FALLBACK_INTERVAL_MS", "ThrottleGate"]
