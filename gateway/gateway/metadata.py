"""Response metadata for observability.

After dispatch the endpoint records what was called (``RpcInfo``) and, on
failure, how it failed.  Both live in the request-scoped state, which every
middleware of the same request shares, so the request logger can read them
once the response is ready.  The response body is never touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from starlette.requests import Request

RPC_INFO_KEY = "rpc_info"
RPC_ERROR_KEY = "rpc_error"


@dataclass(frozen=True, slots=True)
class RpcInfo:
    """The id and method of the call, for logging."""

    id: Any
    method: str


@dataclass(frozen=True, slots=True)
class RpcErrorInfo:
    kind: str
    code: int
    message: str
    data: Any = None


def attach_rpc_info(request: Request, info: RpcInfo) -> None:
    setattr(request.state, RPC_INFO_KEY, info)


def get_rpc_info(request: Request) -> RpcInfo | None:
    """``None`` when the envelope never decoded."""
    return getattr(request.state, RPC_INFO_KEY, None)


def attach_rpc_error(request: Request, error: RpcErrorInfo) -> None:
    setattr(request.state, RPC_ERROR_KEY, error)


def get_rpc_error(request: Request) -> RpcErrorInfo | None:
    return getattr(request.state, RPC_ERROR_KEY, None)
