"""rpcwire — RPC envelope codec shared by the gateway and its callers."""

from rpcwire.envelope import (
    ENTITY_NOT_FOUND,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    UNAUTHORIZED,
    DecodeError,
    EncodeError,
    RpcError,
    RpcRequest,
    RpcResponse,
    decode_request,
    decode_response,
    encode_response,
)

__all__ = [
    "RpcRequest",
    "RpcResponse",
    "RpcError",
    "DecodeError",
    "EncodeError",
    "decode_request",
    "decode_response",
    "encode_response",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "UNAUTHORIZED",
    "ENTITY_NOT_FOUND",
]
