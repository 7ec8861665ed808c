"""JSON-RPC 2.0 envelope types spoken on stdin/stdout."""

import math
from dataclasses import dataclass
from typing import Any

from mcp import types

from gmail_mcp.protocol.errors import InvalidRequest

JSONRPC_VERSION = "2.0"

RequestId = str | int | float


def is_valid_id(value: Any) -> bool:
    """True for ids JSON-RPC allows us to echo: strings and finite numbers (not bools)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, (str, int))


def echo_id(payload: Any) -> RequestId | None:
    """Best-effort id recovery from a payload that failed envelope validation."""
    if isinstance(payload, dict) and is_valid_id(payload.get("id")):
        return payload["id"]
    return None


@dataclass(frozen=True)
class Request:
    """A validated JSON-RPC request or notification.

    ``id is None`` marks a notification: it is handled but never answered.
    """

    method: str
    params: dict[str, Any] | list[Any] | None = None
    id: RequestId | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def from_payload(cls, payload: Any) -> "Request":
        """Validate a decoded JSON value as a request envelope.

        Raises InvalidRequest for anything that is not a single JSON-RPC 2.0
        request object (batches included).
        """
        if not isinstance(payload, dict):
            raise InvalidRequest("Invalid Request: expected a JSON object")
        if payload.get("jsonrpc") != JSONRPC_VERSION:
            raise InvalidRequest('Invalid Request: "jsonrpc" must be "2.0"')

        request_id = payload.get("id")
        if request_id is not None and not is_valid_id(request_id):
            raise InvalidRequest('Invalid Request: "id" must be a string, number or null')

        method = payload.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidRequest('Invalid Request: "method" must be a non-empty string')

        params = payload.get("params")
        if params is not None and not isinstance(params, (dict, list)):
            raise InvalidRequest('Invalid Request: "params" must be an object or array')

        return cls(method=method, params=params, id=request_id)


@dataclass(frozen=True)
class Response:
    """Exactly one of ``result`` / ``error`` is set."""

    id: RequestId | None
    result: dict[str, Any] | None = None
    error: types.ErrorData | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump(by_alias=True, exclude_none=True)
        else:
            body["result"] = self.result if self.result is not None else {}
        return body
