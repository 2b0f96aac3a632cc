"""Tests del throttling por path."""

import threading

import pytest

from seren_sync.core.domain import Category
from seren_sync.throttling import DEFAULT_INTERVALS_MS, FALLBACK_INTERVAL_MS, ThrottleGate

T0 = 1_694_458_200_000


@pytest.fixture
def gate() -> ThrottleGate:
    return ThrottleGate()


# =============================================================================
# LÍMITES DEL INTERVALO
# =============================================================================

class TestIntervalBoundary:
    """now - last >= interval (igualdad inclusiva)."""

    @pytest.mark.parametrize("category", [Category.SENSOR, Category.POSITION, Category.STATE])
    def test_boundary(self, gate, category):
        interval = gate.interval_for(category)
        path = f"test.{category.value}"

        assert gate.should_transmit(path, category, T0) is True
        gate.record(path, T0)

        assert gate.should_transmit(path, category, T0 + interval - 1) is False
        assert gate.should_transmit(path, category, T0 + interval) is True

    def test_unseen_path_is_allowed(self, gate):
        assert gate.last_transmission("never.seen") == 0
        assert gate.should_transmit("never.seen", Category.SENSOR, T0) is True

    def test_paths_are_independent(self, gate):
        gate.record("a", T0)

        assert gate.should_transmit("a", Category.SENSOR, T0 + 1) is False
        assert gate.should_transmit("b", Category.SENSOR, T0 + 1) is True

    def test_check_does_not_record(self, gate):
        gate.should_transmit("a", Category.SENSOR, T0)
        assert gate.tracked_paths == 0


# =============================================================================
# CONFIGURACIÓN
# =============================================================================

class TestIntervals:
    """Defaults por categoría y overrides."""

    def test_defaults(self, gate):
        assert gate.interval_for(Category.POSITION) == 1000
        assert gate.interval_for(Category.SENSOR) == 2000
        assert gate.interval_for(Category.STATE) == 500
        assert DEFAULT_INTERVALS_MS[Category.SENSOR] == 2000

    def test_dump_uses_fallback(self, gate):
        assert gate.interval_for(Category.DUMP) == FALLBACK_INTERVAL_MS

    def test_override(self):
        gate = ThrottleGate({Category.SENSOR: 250})

        assert gate.interval_for(Category.SENSOR) == 250
        assert gate.interval_for(Category.STATE) == 500

    def test_same_path_uses_category_interval(self):
        gate = ThrottleGate({Category.SENSOR: 2000, Category.STATE: 500})
        gate.record("x", T0)

        assert gate.should_transmit("x", Category.STATE, T0 + 500) is True
        assert gate.should_transmit("x", Category.SENSOR, T0 + 500) is False


# =============================================================================
# ESTADO
# =============================================================================

class TestState:
    """Monotonía, atomicidad y limpieza."""

    def test_record_never_rewinds(self, gate):
        gate.record("a", T0 + 1000)
        gate.record("a", T0)

        assert gate.last_transmission("a") == T0 + 1000

    def test_try_transmit_records_on_allow(self, gate):
        assert gate.try_transmit("a", Category.STATE, T0) is True
        assert gate.last_transmission("a") == T0
        assert gate.try_transmit("a", Category.STATE, T0 + 100) is False
        assert gate.last_transmission("a") == T0

    def test_try_transmit_single_winner_across_threads(self, gate):
        """Con evaluaciones concurrentes solo una pasa."""
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(gate.try_transmit("shared", Category.SENSOR, T0))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1

    def test_clear(self, gate):
        gate.record("a", T0)
        gate.record("b", T0)

        assert gate.clear() == 2
        assert gate.tracked_paths == 0
        assert gate.get_stats()["tracked_paths"] == 0
