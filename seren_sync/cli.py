"""CLI entry point: lee NDJSON de stdin y reenvía a los sockets."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import Optional

import uvicorn

from common.config import get_settings

from .config import SyncOptions
from .endpoints import build_app
from .service import SyncService
from .sources.bus import ValueBus
from .sources.ndjson import pump_ndjson

logger = logging.getLogger(__name__)


def _load_options(args: argparse.Namespace) -> SyncOptions:
    options = SyncOptions.from_file(args.options) if args.options else SyncOptions.from_env()
    update = {}
    if args.rules:
        update["rules_file"] = args.rules
    if args.format:
        update["serialization"] = args.format
    if update:
        # model_copy no revalida: volver a pasar por el schema
        data = options.model_dump()
        data.update(update)
        options = SyncOptions.model_validate(data)
    return options


async def _stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def _serve_http(server: uvicorn.Server, port: int) -> bool:
    """Sirve diagnósticos. False si no pudo abrir el puerto."""
    try:
        await server.serve()
    except SystemExit:
        logger.error("HTTP port %d already in use, diagnostics disabled", port)
        return False
    return True


async def _run(options: SyncOptions, http_host: str, http_port: Optional[int]) -> None:
    loop = asyncio.get_running_loop()
    bus = ValueBus(loop)
    service = SyncService(bus)
    service.start(options)

    stop_event = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    server: Optional[uvicorn.Server] = None
    server_task: Optional[asyncio.Task] = None
    if http_port:
        config = uvicorn.Config(
            app=build_app(service),
            host=http_host,
            port=http_port,
            loop="asyncio",
            log_level="warning",
        )
        server = uvicorn.Server(config)
        server_task = asyncio.create_task(_serve_http(server, http_port), name="seren-sync:http")
        logger.info("HTTP diagnostics on http://%s:%d", http_host, http_port)

    pump_task = asyncio.create_task(pump_ndjson(await _stdin_reader(), bus), name="seren-sync:stdin")
    stop_task = asyncio.create_task(stop_event.wait())
    waiters = {pump_task, stop_task}
    if server_task is not None:
        # uvicorn captura SIGINT/SIGTERM: su salida también detiene el servicio
        waiters.add(server_task)
    try:
        while waiters:
            done, waiters = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            if server_task in done and not server_task.result():
                continue
            break
    finally:
        service.stop()
        for task in (pump_task, stop_task):
            task.cancel()
        if server is not None:
            server.should_exit = True
            with contextlib.suppress(asyncio.CancelledError):
                await server_task


def main() -> None:
    settings = get_settings()

    p = argparse.ArgumentParser(description="Forward categorized telemetry values to unix sockets")
    p.add_argument("--options", default=settings.options_file, help="JSON options file (plugin schema)")
    p.add_argument("--rules", default=settings.rules_file, help="JSON classification rules file")
    p.add_argument("--format", choices=("json", "pipe"), default=settings.serialization)
    p.add_argument("--http-host", default=settings.http_host)
    p.add_argument("--http-port", type=int, default=settings.http_port)
    p.add_argument("--log-level", default=settings.log_level)
    args = p.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    options = _load_options(args)
    logger.info("seren-sync started")
    logger.info(
        "Config: sockets=%s format=%s",
        {c.value: path for c, path in options.sockets.items()},
        options.serialization,
    )

    asyncio.run(_run(options, args.http_host, args.http_port))


if __name__ == "__main__":
    main()
