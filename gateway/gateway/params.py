"""Parameter shapes and the generic params decoder.

Every method's ``params`` is decoded through :func:`decode_params` with
the method's target shape.  Unknown fields are ignored in every shape;
missing fields and type mismatches are rejected.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, StrictInt, TypeAdapter, ValidationError

T = TypeVar("T")
D = TypeVar("D")


class ParamsDecodeError(ValueError):
    """*value* did not match the requested shape."""

    def __init__(self, shape: Any, errors: list[dict[str, Any]]) -> None:
        self.shape = shape
        self.errors = errors
        super().__init__(f"cannot decode {_shape_name(shape)}: {len(errors)} error(s)")


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", repr(shape))


# ── Wrapper shapes ───────────────────────────────────────────────────
class ParamsForCreate(BaseModel, Generic[D]):
    data: D


class ParamsForUpdate(BaseModel, Generic[D]):
    id: StrictInt
    data: D


class ParamsIded(BaseModel):
    id: StrictInt


class DataResult(BaseModel, Generic[D]):
    """Every handler result is wrapped as ``{"data": ...}``."""

    data: D


# ── Decoding ─────────────────────────────────────────────────────────
@lru_cache(maxsize=None)
def adapter_for(shape: Any) -> TypeAdapter:
    """Return the (cached) ``TypeAdapter`` for *shape*."""
    return TypeAdapter(shape)


def decode_params(shape: type[T], value: Any) -> T:
    """Decode the untyped *value* into *shape*.

    Raises ``ParamsDecodeError`` on missing fields or type mismatches.
    """
    try:
        return adapter_for(shape).validate_python(value)
    except ValidationError as exc:
        raise ParamsDecodeError(shape, exc.errors(include_url=False)) from exc
