"""Lector NDJSON: una línea JSON por mensaje (delta u objeto de valor)."""

from __future__ import annotations

import asyncio
import json
import logging

from .bus import ValueBus
from .signalk import expand_delta

logger = logging.getLogger(__name__)


async def pump_ndjson(reader: asyncio.StreamReader, bus: ValueBus) -> int:
    """Lee líneas hasta EOF y publica cada valor en el bus.

    Las líneas malformadas se loguean y se saltan.

    Returns:
        Número de valores publicados
    """
    published = 0
    line_no = 0
    while True:
        line = await reader.readline()
        if not line:
            break
        line_no += 1

        text = line.decode("utf-8", errors="replace").strip()
        if not text:
            continue

        try:
            message = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("[NDJSON] Invalid JSON at line %d: %s", line_no, e)
            continue

        if not isinstance(message, dict):
            logger.warning("[NDJSON] Line %d is not a JSON object, skipping", line_no)
            continue

        for raw in expand_delta(message):
            bus.publish(raw)
            published += 1

    logger.info("[NDJSON] Input closed after %d lines (%d values)", line_no, published)
    return published
