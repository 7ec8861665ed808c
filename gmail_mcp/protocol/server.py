"""Sequential stdio server loop: framer → dispatcher → writer until EOF."""

import io
import logging
import sys
from collections.abc import AsyncIterable

import anyio

from gmail_mcp.protocol.dispatcher import Dispatcher
from gmail_mcp.protocol.framing import read_lines
from gmail_mcp.protocol.writer import ResponseWriter, TextSink

logger = logging.getLogger(__name__)


class StdioServer:
    """Reads requests one line at a time and answers each before reading on.

    There is never more than one request in flight, so responses leave in the
    order their requests arrived.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        source: AsyncIterable[str | bytes],
        sink: TextSink,
    ) -> None:
        self._dispatcher = dispatcher
        self._source = source
        self._writer = ResponseWriter(sink)

    async def serve(self) -> int:
        """Run until end-of-input. Returns the number of responses written."""
        written = 0
        async for line in read_lines(self._source):
            response = await self._dispatcher.handle_line(line)
            if response is None:
                continue
            await self._writer.write(response)
            written += 1
        logger.info("Input closed after %d response(s); shutting down", written)
        return written


async def run_stdio(dispatcher: Dispatcher) -> int:
    """Serve ``dispatcher`` on the process's stdin/stdout."""
    # Raw bytes; the dispatcher decodes each line as strict UTF-8.
    stdin = anyio.wrap_file(sys.stdin.buffer)
    stdout = anyio.wrap_file(
        io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", newline="\n", write_through=True)
    )
    logger.info("Serving JSON-RPC on stdio")
    return await StdioServer(dispatcher, stdin, stdout).serve()
