"""Fixtures compartidas."""

from __future__ import annotations

from typing import List

import pytest

from seren_sync.core.classification import PathClassifier
from seren_sync.core.domain import Measurement


class FakeConnection:
    """Conexión en memoria: registra writes y shutdowns."""

    def __init__(self, writable: bool = True):
        self.writable = writable
        self.written: List[Measurement] = []
        self.dropped: List[Measurement] = []
        self.shutdown_calls = 0

    def write(self, measurement: Measurement) -> bool:
        if not self.writable:
            self.dropped.append(measurement)
            return False
        self.written.append(measurement)
        return True

    def shutdown(self) -> None:
        self.shutdown_calls += 1


class FakeClock:
    """Reloj manual en epoch ms."""

    def __init__(self, now: int = 1_694_458_200_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def classifier() -> PathClassifier:
    return PathClassifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_connection_factory():
    return FakeConnection
