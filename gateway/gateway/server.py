"""Gateway — Starlette ASGI server.

Single ``/rpc`` POST endpoint.  Per request, strictly in this order:

1. ``RequestLogMiddleware`` (outermost, observes only)
2. ``ReqStampMiddleware`` — correlation id + ingress time
3. envelope decode → ``RpcInfo`` attached
4. ctx resolution
5. dispatch → encode → error metadata attached on failure

Run directly::

    python -m gateway.server --port 8100
"""

from __future__ import annotations

import argparse
import logging
from typing import Any

from rpcwire import (
    DecodeError,
    EncodeError,
    RpcResponse,
    decode_request,
    encode_response,
)
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from gateway.config import Settings
from gateway.ctx import RESOLVERS, CtxResolver, root_ctx_resolver
from gateway.dispatcher import Registry
from gateway.errors import GatewayError, ResultEncodingFailedError, client_error
from gateway.handlers import registry as task_registry
from gateway.metadata import (
    RpcErrorInfo,
    RpcInfo,
    attach_rpc_error,
    attach_rpc_info,
    get_rpc_info,
)
from gateway.model import ModelManager
from gateway.reqlog import RequestLogMiddleware
from gateway.stamp import STAMP_KEY, ReqStampMiddleware, get_req_stamp

log = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


# ── Helpers ──────────────────────────────────────────────────────────


def _json_response(body: bytes, status: int = 200) -> Response:
    return Response(body, status_code=status, media_type=JSON_MEDIA_TYPE)


def _error_response(request: Request, req_id: Any, exc: Exception) -> Response:
    """Build the error envelope for *exc* and record it for the request log."""
    stamp = getattr(request.state, STAMP_KEY, None)
    req_uuid = str(stamp.uuid) if stamp is not None else None
    status, error = client_error(exc, req_uuid)
    attach_rpc_error(
        request,
        RpcErrorInfo(kind=error.data["kind"], code=error.code, message=error.message, data=error.data),
    )

    info = get_rpc_info(request)
    method = info.method if info is not None else None
    if isinstance(exc, (GatewayError, DecodeError)):
        log.warning("rpc ✗ %s(id=%s) [%s] %s: %s", method, req_id, req_uuid, error.data["kind"], exc)
    else:
        log.exception("handler error for %s(id=%s) [%s]", method, req_id, req_uuid)

    try:
        body = encode_response(RpcResponse(id=req_id, error=error))
    except EncodeError:
        log.warning("cannot echo id of %s [%s]; answering with null id", method, req_uuid)
        body = encode_response(RpcResponse(id=None, error=error))
    return _json_response(body, status)


# ── RPC endpoint ─────────────────────────────────────────────────────


async def rpc_endpoint(request: Request) -> Response:
    """Handle an RPC POST to ``/rpc``."""
    state = request.app.state
    req_id: Any = None

    try:
        rpc_req = decode_request(await request.body())
        req_id = rpc_req.id
        attach_rpc_info(request, RpcInfo(id=rpc_req.id, method=rpc_req.method))
        stamp = get_req_stamp(request)

        log.info("rpc ← %s(id=%s) [%s]", rpc_req.method, req_id, stamp.uuid)

        ctx = await state.ctx_resolver(request)
        request.state.ctx = ctx

        result = await state.registry.dispatch(ctx, state.mm, rpc_req.method, rpc_req.params)
        try:
            body = encode_response(RpcResponse.success(req_id, result))
        except EncodeError as exc:
            raise ResultEncodingFailedError(rpc_req.method) from exc
    except DecodeError as exc:
        return _error_response(request, exc.id, exc)
    except Exception as exc:
        return _error_response(request, req_id, exc)

    return _json_response(body)


# ── App factory ──────────────────────────────────────────────────────


def create_app(
    mm: ModelManager | None = None,
    registry: Registry = task_registry,
    ctx_resolver: CtxResolver = root_ctx_resolver,
    rpc_path: str = "/rpc",
) -> Starlette:
    app = Starlette(
        debug=False,
        routes=[Route(rpc_path, rpc_endpoint, methods=["POST"])],
        middleware=[
            Middleware(RequestLogMiddleware),
            Middleware(ReqStampMiddleware),
        ],
    )
    app.state.registry = registry.freeze()
    app.state.mm = mm if mm is not None else ModelManager()
    app.state.ctx_resolver = ctx_resolver
    return app


app = create_app()


# ── Runnable entrypoint ──────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Task RPC gateway")
    parser.add_argument("--host", type=str, default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument("--log-level", type=str, default=settings.log_level, help="Logging level")
    args = parser.parse_args(argv)

    settings = Settings(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        rpc_path=settings.rpc_path,
        ctx=settings.ctx,
    )

    logging.basicConfig(
        level=settings.log_level_no,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    import uvicorn

    uvicorn.run(
        create_app(ctx_resolver=RESOLVERS[settings.ctx], rpc_path=settings.rpc_path),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
