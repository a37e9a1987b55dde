"""One structured log line per request.

``RequestLogMiddleware`` is installed outermost.  It lets the request run,
then reads the stamp, ``RpcInfo`` and error metadata left in the
request-scoped state and logs them as a single JSON object.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gateway.metadata import get_rpc_error, get_rpc_info
from gateway.stamp import get_req_stamp

log = logging.getLogger(__name__)


def build_log_line(request: Request, status_code: int) -> dict[str, Any]:
    """Collect the request metadata into a JSON-ready dict.

    Raises ``StampMissingError`` if the stamp middleware is not installed
    inside this one.
    """
    stamp = get_req_stamp(request)
    info = get_rpc_info(request)
    error = get_rpc_error(request)
    ctx = getattr(request.state, "ctx", None)
    now = datetime.now(timezone.utc)

    return {
        "uuid": str(stamp.uuid),
        "timestamp": now.isoformat(),
        "time_in": stamp.time_in.isoformat(),
        "duration_ms": round((now - stamp.time_in).total_seconds() * 1000, 3),
        "http_method": request.method,
        "http_path": request.url.path,
        "http_status": status_code,
        "user_id": ctx.user_id if ctx is not None else None,
        "rpc_id": info.id if info is not None else None,
        "rpc_method": info.method if info is not None else None,
        "error_kind": error.kind if error is not None else None,
        "error_data": error.data if error is not None else None,
    }


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        line = build_log_line(request, response.status_code)
        log.info("%s", json.dumps(line, default=str))
        return response
