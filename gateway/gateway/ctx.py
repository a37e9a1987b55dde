"""Caller context.

The gateway never authenticates anyone itself; a *ctx resolver* turns the
HTTP request into a ``Ctx`` before dispatch.  Two resolvers ship:

* ``root_ctx_resolver``   — every call runs as the root user (id 0).
* ``header_ctx_resolver`` — the user id comes from the ``X-User-Id`` header.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from starlette.requests import Request

from gateway.errors import CtxError

USER_ID_HEADER = "X-User-Id"

CtxResolver = Callable[[Request], Awaitable["Ctx"]]


@dataclass(frozen=True, slots=True)
class Ctx:
    user_id: int

    @classmethod
    def root(cls) -> "Ctx":
        return cls(user_id=0)

    @classmethod
    def new(cls, user_id: int) -> "Ctx":
        if user_id == 0:
            raise CtxError("user id 0 is reserved for the root context")
        return cls(user_id=user_id)


async def root_ctx_resolver(request: Request) -> Ctx:
    return Ctx.root()


async def header_ctx_resolver(request: Request) -> Ctx:
    raw = request.headers.get(USER_ID_HEADER)
    if raw is None:
        raise CtxError(f"missing {USER_ID_HEADER} header")
    # plain ASCII digits only; int() would also take "-5", " 12 " and "1_000"
    if not (raw.isascii() and raw.isdigit()):
        raise CtxError(f"invalid {USER_ID_HEADER} header")
    return Ctx.new(int(raw))


RESOLVERS: dict[str, CtxResolver] = {
    "root": root_ctx_resolver,
    "header": header_ctx_resolver,
}
