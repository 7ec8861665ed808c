"""Serializes responses onto the output stream, one JSON object per line."""

import json
import logging
from typing import Protocol

from gmail_mcp.protocol.types import Response

logger = logging.getLogger(__name__)


class TextSink(Protocol):
    """Async text stream; ``anyio.AsyncFile`` wrapping stdout satisfies it."""

    async def write(self, data: str) -> int: ...

    async def flush(self) -> None: ...


class ResponseWriter:
    """Writes each response as a single line and flushes before returning.

    The flush makes the response visible to the caller before the server goes
    back to reading, which the caller relies on to pair requests with replies.
    """

    def __init__(self, sink: TextSink) -> None:
        self._sink = sink

    async def write(self, response: Response) -> None:
        line = json.dumps(response.to_dict(), separators=(",", ":"))
        await self._sink.write(line + "\n")
        await self._sink.flush()
        logger.debug("→ %.200s", line)
