"""Method dispatch registry.

Handlers register themselves via the ``@registry.handler`` decorator,
naming the params shape they expect.  The dispatcher maps RPC method
names to those handlers — it decodes params, awaits the handler and turns
its result into a JSON-compatible value, nothing more.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from pydantic_core import PydanticSerializationError, to_jsonable_python

from gateway.errors import (
    InvalidParamsError,
    MethodUnknownError,
    MissingParamsError,
    ResultEncodingFailedError,
)
from gateway.params import ParamsDecodeError, adapter_for, decode_params

log = logging.getLogger(__name__)

# Type alias for an RPC handler: async (ctx, mm[, params]) -> result
HandlerFn = Callable[..., Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class MethodEntry:
    """One registered method: its handler and the params shape it decodes."""

    name: str
    fn: HandlerFn
    params_shape: Any = None

    @property
    def takes_params(self) -> bool:
        return self.params_shape is not None

    async def invoke(self, ctx: Any, mm: Any, params: Any) -> Any:
        """Decode *params*, call the handler and return its raw result."""
        if not self.takes_params:
            return await self.fn(ctx, mm)

        if params is None:
            raise MissingParamsError(self.name)
        try:
            decoded = decode_params(self.params_shape, params)
        except ParamsDecodeError as exc:
            log.debug("invalid params for %s: %s", self.name, exc.errors)
            raise InvalidParamsError(self.name) from exc
        return await self.fn(ctx, mm, decoded)


def encode_result(method: str, result: Any) -> Any:
    """Turn a handler result into a JSON-compatible value."""
    try:
        return to_jsonable_python(result)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        log.error("cannot encode result of %s: %s", method, exc)
        raise ResultEncodingFailedError(method) from exc


class Registry:
    """A static method → handler table.

    Usage::

        registry = Registry()

        @registry.handler("show_task", params=ParamsIded)
        async def show_task(ctx, mm, params):
            ...

        registry.freeze()
        result = await registry.dispatch(ctx, mm, "show_task", {"id": 1})

    Once frozen the table is read-only for the life of the process.
    """

    def __init__(self) -> None:
        self._entries: dict[str, MethodEntry] = {}
        self._frozen = False

    # -- Registration --------------------------------------------------
    def handler(
        self, method: str | None = None, *, params: Any = None
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator that registers *fn* under *method* (default: its name).

        With *params* the handler is called as ``fn(ctx, mm, decoded)``,
        otherwise as ``fn(ctx, mm)``.
        """

        def decorator(fn: HandlerFn) -> HandlerFn:
            self.add(MethodEntry(
                name=method or fn.__name__,
                fn=fn,
                params_shape=params,
            ))
            return fn

        return decorator

    def add(self, entry: MethodEntry) -> None:
        if self._frozen:
            raise RuntimeError(f"registry is frozen; cannot register {entry.name!r}")
        if entry.name in self._entries:
            raise ValueError(f"method {entry.name!r} is already registered")
        if entry.takes_params:
            # build the decoder at registration, not on the first call
            adapter_for(entry.params_shape)
        self._entries[entry.name] = entry
        log.debug("registered handler %r → %s", entry.name, entry.fn.__qualname__)

    def freeze(self) -> "Registry":
        """Make the table read-only.  Idempotent."""
        if not self._frozen:
            self._entries = MappingProxyType(dict(self._entries))  # type: ignore[assignment]
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Dispatch ------------------------------------------------------
    async def dispatch(self, ctx: Any, mm: Any, method: str, params: Any = None) -> Any:
        """Call the handler for *method* and return its JSON-compatible result.

        Raises ``MethodUnknownError``, ``MissingParamsError``,
        ``InvalidParamsError`` or ``ResultEncodingFailedError``; handler
        errors propagate unchanged.
        """
        entry = self._entries.get(method)
        if entry is None:
            raise MethodUnknownError(method)
        result = await entry.invoke(ctx, mm, params)
        return encode_result(method, result)

    # -- Introspection -------------------------------------------------
    @property
    def entries(self) -> Mapping[str, MethodEntry]:
        return MappingProxyType(self._entries)

    @property
    def methods(self) -> list[str]:
        return list(self._entries.keys())

    def is_registered(self, method: str) -> bool:
        return method in self._entries

    def get(self, method: str) -> MethodEntry | None:
        return self._entries.get(method)
