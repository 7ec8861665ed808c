"""JSON-RPC dispatcher — turns one framed line into at most one response.

Each line walks the same path::

    parse JSON ─► validate envelope ─► route on method ─► handler
         │               │                    │              │
      -32700          -32600               -32601     -32602 / -32000

Every failure is converted into an error ``Response``; nothing raised while
handling one line escapes to the read loop, so the server stays responsive for
the next request.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcp import types
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS

from gmail_mcp.protocol.errors import (
    InvalidParams,
    InvalidRequest,
    MethodNotFound,
    ParseError,
    RPCError,
    ToolExecutionError,
)
from gmail_mcp.protocol.registry import ToolRegistry
from gmail_mcp.protocol.types import Request, Response, echo_id

logger = logging.getLogger(__name__)

SERVER_NAME = "gmail-mcp-server"
SERVER_VERSION = "0.1.0"

_Route = Callable[[Request], Awaitable[dict[str, Any]]]


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by json.loads but are not JSON.
    raise ValueError(f"{name} is not valid JSON")


class Dispatcher:
    """Routes requests to the built-in methods and the tool registry."""

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = SERVER_NAME,
        server_version: str = SERVER_VERSION,
    ) -> None:
        self._registry = registry
        self._server_info = types.Implementation(name=server_name, version=server_version)
        self._routes: dict[str, _Route] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    # ── Public API ─────────────────────────────────────────────────────────────

    async def handle_line(self, line: str | bytes) -> Response | None:
        """Handle one framed line; returns None when no reply is owed.

        Byte lines must be valid UTF-8. Like malformed JSON, anything else is a
        parse error.
        """
        try:
            text = line.decode("utf-8") if isinstance(line, bytes) else line
            payload = json.loads(text, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as exc:
            logger.warning("Unparseable line (%s): %.200s", exc, line)
            return Response(id=None, error=ParseError("Parse error").to_error_data())

        try:
            request = Request.from_payload(payload)
        except InvalidRequest as exc:
            logger.warning("%s: %.200s", exc.message, line)
            return Response(id=echo_id(payload), error=exc.to_error_data())

        return await self.handle_request(request)

    async def handle_request(self, request: Request) -> Response | None:
        """Run ``request`` and wrap the outcome; notifications yield None."""
        logger.debug("← %s (id=%r)", request.method, request.id)
        try:
            result = await self._route(request)
        except RPCError as exc:
            logger.info("%s failed: %s", request.method, exc.message)
            return self._reply(request, Response(id=request.id, error=exc.to_error_data()))
        except ToolExecutionError as exc:
            logger.warning("%s failed (%s): %s", request.method, exc.kind, exc)
            return self._reply(request, Response(id=request.id, error=exc.to_error_data()))
        except Exception:  # noqa: BLE001
            logger.exception("Internal error while handling %s", request.method)
            error = RPCError("Internal error").to_error_data()
            return self._reply(request, Response(id=request.id, error=error))
        return self._reply(request, Response(id=request.id, result=result))

    # ── Routing ────────────────────────────────────────────────────────────────

    async def _route(self, request: Request) -> dict[str, Any]:
        route = self._routes.get(request.method)
        if route is not None:
            return await route(request)
        if request.is_notification and request.method.startswith("notifications/"):
            logger.debug("Notification %s acknowledged", request.method)
            return {}
        raise MethodNotFound(f"Method not found: {request.method}", {"method": request.method})

    async def _initialize(self, request: Request) -> dict[str, Any]:
        params = request.params if isinstance(request.params, dict) else {}
        requested = params.get("protocolVersion")
        version = (
            requested
            if requested in SUPPORTED_PROTOCOL_VERSIONS
            else types.LATEST_PROTOCOL_VERSION
        )
        client = params.get("clientInfo") or {}
        logger.info(
            "Initialize from %s (protocol %s → %s)",
            client.get("name", "unknown client") if isinstance(client, dict) else "unknown client",
            requested,
            version,
        )
        result = types.InitializeResult(
            protocolVersion=version,
            capabilities=types.ServerCapabilities(tools=types.ToolsCapability()),
            serverInfo=self._server_info,
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    async def _ping(self, request: Request) -> dict[str, Any]:
        return {}

    async def _list_tools(self, request: Request) -> dict[str, Any]:
        return {
            "tools": [
                tool.model_dump(by_alias=True, exclude_none=True)
                for tool in self._registry.list_tools()
            ]
        }

    async def _call_tool(self, request: Request) -> dict[str, Any]:
        params = request.params
        if not isinstance(params, dict):
            raise InvalidParams("params", "must be an object")
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParams("name", "must be a string")
        self._registry.get(name)
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParams("arguments", "must be an object")

        try:
            text = await self._registry.invoke(name, arguments)
        except (RPCError, ToolExecutionError):
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Tool %s crashed: %s", name, exc, exc_info=True)
            raise ToolExecutionError(f"Tool {name!r} failed unexpectedly") from exc

        result = types.CallToolResult(
            content=[types.TextContent(type="text", text=text)],
            isError=False,
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    # ── Internal helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _reply(request: Request, response: Response) -> Response | None:
        if request.is_notification:
            return None
        return response
