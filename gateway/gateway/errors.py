"""Dispatch-level error kinds and their mapping to client-visible errors.

Each error carries a JSON-RPC ``code``, a stable ``kind`` string and the
HTTP status the endpoint answers with.
"""

from __future__ import annotations

from typing import Any

from rpcwire import (
    ENTITY_NOT_FOUND,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    UNAUTHORIZED,
    DecodeError,
    RpcError,
)


class GatewayError(Exception):
    """Base class for errors raised by the gateway core."""

    code = INTERNAL_ERROR
    kind = "GatewayError"
    http_status = 500

    def detail(self) -> dict[str, Any]:
        """Extra fields safe to expose to the caller."""
        return {}


class MethodUnknownError(GatewayError):
    """Raised when no handler is registered for the requested method."""

    code = METHOD_NOT_FOUND
    kind = "MethodUnknown"
    http_status = 400

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}")

    def detail(self) -> dict[str, Any]:
        return {"method": self.method}


class MissingParamsError(GatewayError):
    code = INVALID_PARAMS
    kind = "MissingParams"
    http_status = 400

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Missing params for method: {method}")

    def detail(self) -> dict[str, Any]:
        return {"method": self.method}


class InvalidParamsError(GatewayError):
    """Params were present but did not decode into the method's shape.

    The decode diagnostic stays on ``__cause__`` and is only logged.
    """

    code = INVALID_PARAMS
    kind = "InvalidParams"
    http_status = 400

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Invalid params for method: {method}")

    def detail(self) -> dict[str, Any]:
        return {"method": self.method}


class ResultEncodingFailedError(GatewayError):
    kind = "ResultEncodingFailed"

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Result of {method} could not be encoded")


class StampMissingError(GatewayError):
    """A request stamp was read before the stamp middleware ran.

    Signals a wiring bug, never a caller mistake.
    """

    kind = "StampMissing"

    def __init__(self) -> None:
        super().__init__("Request stamp not set; is ReqStampMiddleware installed?")


class ServiceError(GatewayError):
    """Base for business errors raised by handlers.

    Handlers raise subclasses; the gateway passes them through with their
    own ``kind`` and ``code``.
    """

    kind = "ServiceError"
    http_status = 400


class EntityNotFoundError(ServiceError):
    code = ENTITY_NOT_FOUND
    kind = "EntityNotFound"

    def __init__(self, entity: str, id: int) -> None:
        self.entity = entity
        self.id = id
        super().__init__(f"{entity} not found: id={id}")

    def detail(self) -> dict[str, Any]:
        return {"entity": self.entity, "id": self.id}


class CtxError(ServiceError):
    """The caller's context could not be resolved."""

    code = UNAUTHORIZED
    kind = "CtxMissing"
    http_status = 403


def client_error(exc: BaseException, req_uuid: str | None = None) -> tuple[int, RpcError]:
    """Map *exc* to ``(http_status, RpcError)``.

    Unknown exceptions become a generic ``ServiceError`` with no detail so
    internals never reach the caller.
    """
    if isinstance(exc, DecodeError):
        kind = "ParseError" if exc.code == PARSE_ERROR else "InvalidRequest"
        status, code, message, detail = 400, exc.code, str(exc), {}
    elif isinstance(exc, GatewayError):
        kind = exc.kind
        status, code, message, detail = exc.http_status, exc.code, str(exc), exc.detail()
    else:
        kind = "ServiceError"
        status, code, message, detail = 500, INTERNAL_ERROR, "Internal error", {}

    data: dict[str, Any] = {"kind": kind}
    if req_uuid is not None:
        data["req_uuid"] = req_uuid
    if detail:
        data["detail"] = detail
    return status, RpcError(code=code, message=message, data=data)
