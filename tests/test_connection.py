"""Tests de ReconnectingConnection.

Cubre:
1. A lo sumo un timer de reconexión pendiente
2. Shutdown cancela timers y no reabre
3. Escritura best-effort sin conexión
4. Socket Unix real (entrega de líneas y detección de cierre remoto)
"""

import asyncio
import json
import os
import shutil
import tempfile

import pytest

from seren_sync.core.domain import Measurement
from seren_sync.transports.unix_socket import ConnectionState, ReconnectingConnection

MEASUREMENT = Measurement(
    path="navigation.speedOverGround",
    time=1694458123000,
    value=5.1,
    source="gps.0",
)


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_for(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class RefusingOpener:
    """Opener que siempre falla como un socket inexistente."""

    def __init__(self):
        self.calls = 0

    async def __call__(self, endpoint):
        self.calls += 1
        raise ConnectionRefusedError(2, "No such file or directory", endpoint)


@pytest.fixture
def socket_dir():
    # Directorio corto: los paths de sockets Unix tienen límite de longitud
    path = tempfile.mkdtemp(prefix="ss")
    yield path
    shutil.rmtree(path, ignore_errors=True)


# =============================================================================
# RECONEXIÓN
# =============================================================================

class TestReconnect:
    """Timer único y apagado definitivo."""

    @pytest.mark.asyncio
    async def test_failed_connect_schedules_one_timer(self):
        opener = RefusingOpener()
        conn = ReconnectingConnection("sensor", "/tmp/missing.sock",
                                      reconnect_delay_seconds=60, opener=opener)
        conn.connect()
        await settle()

        assert opener.calls == 1
        assert conn.state is ConnectionState.CLOSED
        assert conn.reconnect_pending is True
        assert conn.stats["last_error"].startswith("ConnectionRefusedError")

        # Un segundo cierre no arma otro timer
        conn._on_close(had_error=False)
        assert conn.schedule_reconnect() is False
        assert conn.reconnect_pending is True

        conn.shutdown()

    @pytest.mark.asyncio
    async def test_timer_retries_connection(self):
        opener = RefusingOpener()
        conn = ReconnectingConnection("state", "/tmp/missing.sock",
                                      reconnect_delay_seconds=0.01, opener=opener)
        conn.connect()
        await wait_for(lambda: opener.calls >= 3)

        assert conn.stats["reconnect_count"] >= 2
        conn.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending_timer(self):
        opener = RefusingOpener()
        conn = ReconnectingConnection("sensor", "/tmp/missing.sock",
                                      reconnect_delay_seconds=0.02, opener=opener)
        conn.connect()
        await settle()
        assert conn.reconnect_pending is True

        conn.shutdown()
        assert conn.reconnect_pending is False

        await asyncio.sleep(0.1)
        assert opener.calls == 1
        assert conn.state is ConnectionState.SHUTTING_DOWN

    @pytest.mark.asyncio
    async def test_shutdown_is_idempotent_and_blocks_connect(self):
        opener = RefusingOpener()
        conn = ReconnectingConnection("sensor", "/tmp/missing.sock", opener=opener)

        conn.shutdown()
        conn.shutdown()
        conn.connect()
        await settle()

        assert opener.calls == 0
        assert conn.is_shutting_down is True

    @pytest.mark.asyncio
    async def test_shutdown_during_connect_attempt(self):
        started = asyncio.Event()

        async def hanging_opener(endpoint):
            started.set()
            await asyncio.Event().wait()

        conn = ReconnectingConnection("position", "/tmp/missing.sock",
                                      opener=hanging_opener)
        conn.connect()
        await started.wait()

        conn.shutdown()
        await settle()

        assert conn.reconnect_pending is False
        assert conn.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_while_in_flight_is_noop(self):
        calls = []

        async def hanging_opener(endpoint):
            calls.append(endpoint)
            await asyncio.Event().wait()

        conn = ReconnectingConnection("sensor", "/tmp/missing.sock",
                                      opener=hanging_opener)
        conn.connect()
        conn.connect()
        await settle()

        assert len(calls) == 1
        assert conn.stats["connect_attempts"] == 1
        conn.shutdown()


# =============================================================================
# ESCRITURA
# =============================================================================

class TestWrite:
    """Best-effort: sin conexión se descarta sin excepción."""

    def test_write_without_connection_is_dropped(self):
        conn = ReconnectingConnection("sensor", "/tmp/missing.sock")

        assert conn.write(MEASUREMENT) is False
        assert conn.stats["records_dropped"] == 1
        assert conn.stats["records_written"] == 0


# =============================================================================
# SOCKET REAL
# =============================================================================

class TestUnixSocket:
    """Extremo a extremo contra un servidor Unix local."""

    @pytest.mark.asyncio
    async def test_delivers_json_lines(self, socket_dir):
        path = os.path.join(socket_dir, "s.sock")
        received = asyncio.Queue()

        async def handle(reader, writer):
            while True:
                line = await reader.readline()
                if not line:
                    break
                await received.put(line)
            writer.close()

        server = await asyncio.start_unix_server(handle, path=path)
        conn = ReconnectingConnection("sensor", path, reconnect_delay_seconds=60)
        try:
            conn.connect()
            await wait_for(lambda: conn.is_writable)

            assert conn.write(MEASUREMENT) is True
            line = await asyncio.wait_for(received.get(), timeout=2)

            assert line.endswith(b"\n")
            assert json.loads(line) == {
                "path": "navigation.speedOverGround",
                "time": 1694458123000,
                "value": 5.1,
                "source": "gps.0",
            }
            assert conn.stats["records_written"] == 1
        finally:
            conn.shutdown()
            server.close()
            await server.wait_closed()

    @pytest.mark.asyncio
    async def test_remote_close_schedules_reconnect(self, socket_dir):
        path = os.path.join(socket_dir, "s.sock")

        async def handle(reader, writer):
            writer.close()

        server = await asyncio.start_unix_server(handle, path=path)
        conn = ReconnectingConnection("state", path, reconnect_delay_seconds=60)
        try:
            conn.connect()
            await wait_for(lambda: conn.reconnect_pending)

            assert conn.state is ConnectionState.CLOSED
            assert conn.write(MEASUREMENT) is False
        finally:
            conn.shutdown()
            server.close()
            await server.wait_closed()

    @pytest.mark.asyncio
    async def test_missing_socket_file(self, socket_dir):
        path = os.path.join(socket_dir, "absent.sock")
        conn = ReconnectingConnection("sensor", path, reconnect_delay_seconds=60)

        conn.connect()
        await wait_for(lambda: conn.reconnect_pending)

        assert conn.is_connected is False
        conn.shutdown()
