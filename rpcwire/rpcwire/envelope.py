"""RPC envelope codec.

Pure data — no I/O, no business logic.  The gateway decodes requests and
encodes responses with it; the client does the reverse.

Wire shape::

    request   {"id": <opaque>, "method": "<name>", "params": <opaque>}
    success   {"id": <echoed>, "result": <value>}
    failure   {"id": <echoed>, "error": {"code": int, "message": str, "data": ...}}
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ── Server-defined error codes (-32000 .. -32099) ───────────────────
UNAUTHORIZED = -32001
ENTITY_NOT_FOUND = -32004


class DecodeError(ValueError):
    """Raised when a request body cannot be decoded into an ``RpcRequest``.

    ``id`` holds the request id when the body was an object that carried
    one, so the error can still echo it.
    """

    def __init__(self, message: str, code: int = INVALID_REQUEST, id: Any = None) -> None:
        self.code = code
        self.id = id
        super().__init__(message)


class EncodeError(ValueError):
    """Raised when a response cannot be serialised to JSON."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _parse_float(text: str) -> float:
    # 1e999 parses to inf, which could never be written back out
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _loads(raw: bytes | str) -> Any:
    try:
        return json.loads(raw, parse_constant=_reject_constant, parse_float=_parse_float)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(f"Parse error: {exc}", code=PARSE_ERROR) from exc


# ── Models ───────────────────────────────────────────────────────────
@dataclass(slots=True)
class RpcError:
    """Error object carried by a failed response."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "RpcError":
        if not isinstance(raw, dict):
            raise DecodeError("'error' must be a JSON object")
        code = raw.get("code")
        message = raw.get("message")
        if isinstance(code, bool) or not isinstance(code, int):
            raise DecodeError("missing or invalid 'error.code' field")
        if not isinstance(message, str):
            raise DecodeError("missing or invalid 'error.message' field")
        return cls(code=code, message=message, data=raw.get("data"))


@dataclass(slots=True)
class RpcRequest:
    """Inbound RPC request.

    ``id`` is opaque and echoed back untouched; ``None`` means it was
    absent.  ``params`` is opaque here too — its shape is checked by the
    method that receives it.
    """

    method: str
    params: Any = None
    id: Any = None

    # -- Convenience ---------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "RpcRequest":
        """Parse a raw dict into a request — raises ``DecodeError`` on bad input."""
        if not isinstance(raw, dict):
            raise DecodeError("request must be a JSON object")
        req_id = raw.get("id")
        method = raw.get("method")
        if not isinstance(method, str) or not method:
            raise DecodeError("missing or invalid 'method' field", id=req_id)
        return cls(method=method, params=raw.get("params"), id=req_id)


@dataclass(slots=True)
class RpcResponse:
    """Outbound RPC response."""

    id: Any = None
    result: Any = None
    error: RpcError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "RpcResponse":
        if not isinstance(raw, dict):
            raise DecodeError("response must be a JSON object")
        if "error" in raw and raw["error"] is not None:
            return cls(id=raw.get("id"), error=RpcError.from_dict(raw["error"]))
        if "result" not in raw:
            raise DecodeError("response carries neither 'result' nor 'error'")
        return cls(id=raw.get("id"), result=raw["result"])

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(cls, req_id: Any, result: Any) -> "RpcResponse":
        return cls(id=req_id, result=result)

    @classmethod
    def fail(
        cls, req_id: Any, code: int, message: str, data: Any = None
    ) -> "RpcResponse":
        return cls(id=req_id, error=RpcError(code=code, message=message, data=data))


# ── Codec ────────────────────────────────────────────────────────────
def decode_request(raw: bytes | str) -> RpcRequest:
    """Decode a raw request body.

    Raises ``DecodeError`` with ``PARSE_ERROR`` for non-JSON input and
    ``INVALID_REQUEST`` for JSON of the wrong shape.
    """
    return RpcRequest.from_dict(_loads(raw))


def encode_response(resp: RpcResponse) -> bytes:
    """Serialise *resp* to compact UTF-8 JSON."""
    try:
        text = json.dumps(
            resp.to_dict(),
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodeError(f"response is not JSON-serialisable: {exc}") from exc
    return text.encode("utf-8")


def decode_response(raw: bytes | str) -> RpcResponse:
    return RpcResponse.from_dict(_loads(raw))
