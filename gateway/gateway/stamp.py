"""Request stamping.

``ReqStampMiddleware`` gives every inbound request a correlation id and an
ingress timestamp before anything else touches it.  Later stages read it
back with :func:`get_req_stamp`.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gateway.errors import StampMissingError

log = logging.getLogger(__name__)

STAMP_KEY = "req_stamp"
REQUEST_ID_HEADER = "X-Request-Id"


@dataclass(frozen=True, slots=True)
class ReqStamp:
    uuid: uuid.UUID
    time_in: datetime

    @classmethod
    def new(cls) -> "ReqStamp":
        return cls(uuid=uuid.uuid4(), time_in=datetime.now(timezone.utc))


def get_req_stamp(request: Request) -> ReqStamp:
    """Return the stamp set at ingress.

    Raises ``StampMissingError`` if the middleware never ran for *request*.
    """
    stamp = getattr(request.state, STAMP_KEY, None)
    if stamp is None:
        raise StampMissingError()
    return stamp


def set_req_stamp(request: Request) -> ReqStamp:
    """Stamp *request* unless it already carries a stamp."""
    stamp = getattr(request.state, STAMP_KEY, None)
    if stamp is not None:
        log.debug("request already stamped %s", stamp.uuid)
        return stamp
    stamp = ReqStamp.new()
    setattr(request.state, STAMP_KEY, stamp)
    return stamp


class ReqStampMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        stamp = set_req_stamp(request)
        log.debug("stamped %s %s → %s", request.method, request.url.path, stamp.uuid)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = str(stamp.uuid)
        return response
