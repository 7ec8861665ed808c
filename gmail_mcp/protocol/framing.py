"""Line framing for the stdio transport: one JSON-RPC message per line."""

import logging
from collections.abc import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)


async def read_lines(stream: AsyncIterable[str | bytes]) -> AsyncIterator[str | bytes]:
    """Yield each non-blank line of ``stream`` with surrounding whitespace removed.

    ``stream`` is anything that iterates line by line, typically an
    ``anyio.AsyncFile`` wrapping stdin.  Byte lines are passed on undecoded so
    that the dispatcher can answer malformed UTF-8 with a parse error.
    Iteration ends when the stream reports end-of-input.
    """
    async for raw in stream:
        line = raw.strip()
        if not line:
            continue
        logger.debug("framer: read %d units", len(line))
        yield line
    logger.debug("framer: end of input")
