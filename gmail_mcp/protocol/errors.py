"""Exception hierarchy for the JSON-RPC server.

Two families travel back to the caller as JSON-RPC ``error`` objects:

* ``RPCError``: protocol-level failures (bad JSON, bad envelope, unknown
  method or tool, schema-invalid arguments).
* ``ToolExecutionError``: a tool ran but could not finish (attachment
  unreadable, credential unavailable, delivery refused).

``FatalStartupError`` never reaches the wire: it aborts the process before the
dispatch loop starts.
"""

from typing import Any

from mcp import types

#: JSON-RPC code used for every tool execution failure.
TOOL_EXECUTION_ERROR = -32000


class RPCError(Exception):
    """A JSON-RPC error with a fixed code."""

    code: int = types.INTERNAL_ERROR

    def __init__(self, message: str, data: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data

    def to_error_data(self) -> types.ErrorData:
        return types.ErrorData(code=self.code, message=self.message, data=self.data)


class ParseError(RPCError):
    code = types.PARSE_ERROR


class InvalidRequest(RPCError):
    code = types.INVALID_REQUEST


class MethodNotFound(RPCError):
    code = types.METHOD_NOT_FOUND


class InvalidParams(RPCError):
    """Arguments failed schema validation; ``field`` names the culprit."""

    code = types.INVALID_PARAMS

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid params: {field!r} {reason}",
            {"field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason


class ToolExecutionError(Exception):
    """Raised by a tool handler that could not complete.

    ``kind`` is a stable machine-readable tag surfaced in ``error.data.kind``;
    ``str(exc)`` is the human-readable message.
    """

    kind = "internal"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details = details

    def to_error_data(self) -> types.ErrorData:
        return types.ErrorData(
            code=TOOL_EXECUTION_ERROR,
            message=str(self),
            data={"kind": self.kind, **self.details},
        )


class AttachmentError(ToolExecutionError):
    """The attachment file could not be read."""

    kind = "attachment"

    def __init__(self, path: str, cause: str) -> None:
        super().__init__(f"Cannot read attachment {path!r}: {cause}", path=path, cause=cause)
        self.path = path
        self.cause = cause


class AuthError(ToolExecutionError):
    """No usable credential could be obtained or the server rejected it."""

    kind = "auth"


class DeliveryError(ToolExecutionError):
    """The mail transport refused or failed to deliver the message."""

    kind = "delivery"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to send email: {reason}", reason=reason)
        self.reason = reason


class FatalStartupError(Exception):
    """Mandatory configuration is missing; the server cannot start."""
