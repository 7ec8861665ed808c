"""Static tool registry — descriptors, argument validation and invocation.

A tool's advertised ``inputSchema`` and the checks applied to incoming
arguments are both generated from the same ``Param`` table, so ``tools/list``
can never drift from what ``tools/call`` enforces.
"""

import logging
import re
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from email.utils import parseaddr
from typing import Any

from mcp import types

from gmail_mcp.protocol.errors import InvalidParams, MethodNotFound

logger = logging.getLogger(__name__)

#: Handler receives validated arguments and returns the confirmation text.
ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]

_ADDR_SPEC = re.compile(r"^[^@\s]+@[^@\s]+$")

# JSON Schema type name → Python check
_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "object": lambda v: isinstance(v, dict),
    "array": lambda v: isinstance(v, list),
}


def is_email_address(value: str) -> bool:
    """Accept ``user@host`` or ``Display Name <user@host>``."""
    _, addr = parseaddr(value)
    return bool(addr) and _ADDR_SPEC.match(addr) is not None


@dataclass(frozen=True)
class Param:
    """One named tool argument."""

    name: str
    description: str
    type: str = "string"
    required: bool = True
    min_length: int | None = None
    format: str | None = None  # only "email" is enforced
    single_line: bool = False  # header fields: no CR or LF

    def __post_init__(self) -> None:
        if self.type not in _TYPE_CHECKS:
            raise ValueError(f"Unsupported parameter type {self.type!r} for {self.name!r}")

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.format is not None:
            schema["format"] = self.format
        if self.single_line:
            schema["pattern"] = r"^[^\r\n]*$"
        return schema

    def check(self, value: Any) -> None:
        """Raise InvalidParams if ``value`` does not satisfy this parameter."""
        if not _TYPE_CHECKS[self.type](value):
            raise InvalidParams(self.name, f"must be of type {self.type}")
        if self.min_length is not None and len(value) < self.min_length:
            raise InvalidParams(self.name, f"must be at least {self.min_length} character(s) long")
        if self.single_line and ("\r" in value or "\n" in value):
            raise InvalidParams(self.name, "must not contain line breaks")
        if self.format == "email" and not is_email_address(value):
            raise InvalidParams(self.name, "must be a valid email address")


@dataclass(frozen=True)
class Tool:
    """A registry entry: descriptor fields plus the coroutine that runs the tool."""

    name: str
    description: str
    params: tuple[Param, ...]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.params},
            "required": [p.name for p in self.params if p.required],
            "additionalProperties": False,
        }

    def descriptor(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )

    def validate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Return the arguments unchanged if they satisfy the schema.

        Checks run in declaration order so the first offending field reported
        is deterministic.
        """
        known = {p.name for p in self.params}
        for key in arguments:
            if key not in known:
                raise InvalidParams(key, "is not a recognised argument")
        for param in self.params:
            if param.name not in arguments or arguments[param.name] is None:
                if param.required:
                    raise InvalidParams(param.name, "is required")
                continue
            param.check(arguments[param.name])
        return {k: v for k, v in arguments.items() if v is not None}


class ToolRegistry:
    """Name → Tool mapping fixed at construction time."""

    def __init__(self, tools: Iterable[Tool]) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name!r}")
            self._tools[tool.name] = tool
        logger.debug("Registered tools: %s", ", ".join(self._tools))

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def list_tools(self) -> list[types.Tool]:
        """Descriptors in registration order."""
        return [tool.descriptor() for tool in self._tools.values()]

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise MethodNotFound(f"Unknown tool: {name}", {"tool": name}) from None

    async def invoke(self, name: str, arguments: dict[str, Any]) -> str:
        """Validate ``arguments`` against the tool's schema, then run it."""
        tool = self.get(name)
        validated = tool.validate(arguments)
        logger.info("Calling tool %s", name)
        return await tool.handler(validated)
