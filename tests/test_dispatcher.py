"""Tests for the method registry and dispatcher."""

import pytest
from gateway.dispatcher import MethodEntry, Registry
from gateway.errors import (
    EntityNotFoundError,
    InvalidParamsError,
    MethodUnknownError,
    MissingParamsError,
    ResultEncodingFailedError,
)
from gateway.params import DataResult, ParamsIded

CTX = object()
MM = object()


@pytest.fixture
def registry():
    registry = Registry()
    calls = []

    @registry.handler("ping")
    async def ping(ctx, mm):
        calls.append(("ping", ctx, mm))
        return DataResult[str](data="pong")

    @registry.handler("show", params=ParamsIded)
    async def show(ctx, mm, params):
        calls.append(("show", ctx, mm, params))
        if params.id < 0:
            raise EntityNotFoundError("thing", params.id)
        return DataResult[dict](data={"id": params.id})

    @registry.handler(params=ParamsIded)
    async def unencodable(ctx, mm, params):
        return object()

    registry.calls = calls
    return registry.freeze()


@pytest.mark.anyio
async def test_dispatch_without_params(registry):
    result = await registry.dispatch(CTX, MM, "ping")
    assert result == {"data": "pong"}
    assert registry.calls == [("ping", CTX, MM)]


@pytest.mark.anyio
async def test_no_params_method_ignores_params(registry):
    assert await registry.dispatch(CTX, MM, "ping", {"ignored": True}) == {"data": "pong"}


@pytest.mark.anyio
async def test_dispatch_with_params(registry):
    result = await registry.dispatch(CTX, MM, "show", {"id": 5})
    assert result == {"data": {"id": 5}}
    _, ctx, mm, params = registry.calls[0]
    assert (ctx, mm) == (CTX, MM)
    assert isinstance(params, ParamsIded)


@pytest.mark.anyio
async def test_unknown_method(registry):
    with pytest.raises(MethodUnknownError) as exc_info:
        await registry.dispatch(CTX, MM, "bogus")
    assert exc_info.value.method == "bogus"
    assert exc_info.value.kind == "MethodUnknown"


@pytest.mark.anyio
async def test_missing_params(registry):
    with pytest.raises(MissingParamsError) as exc_info:
        await registry.dispatch(CTX, MM, "show", None)
    assert exc_info.value.method == "show"
    assert registry.calls == []


@pytest.mark.anyio
async def test_invalid_params(registry):
    with pytest.raises(InvalidParamsError) as exc_info:
        await registry.dispatch(CTX, MM, "show", {"id": "five"})
    assert exc_info.value.method == "show"
    # the pydantic diagnostic stays off the message
    assert "five" not in str(exc_info.value)
    assert exc_info.value.__cause__ is not None
    assert registry.calls == []


@pytest.mark.anyio
async def test_handler_error_passes_through(registry):
    with pytest.raises(EntityNotFoundError) as exc_info:
        await registry.dispatch(CTX, MM, "show", {"id": -1})
    assert exc_info.value.kind == "EntityNotFound"


@pytest.mark.anyio
async def test_unencodable_result(registry):
    with pytest.raises(ResultEncodingFailedError) as exc_info:
        await registry.dispatch(CTX, MM, "unencodable", {"id": 1})
    assert exc_info.value.method == "unencodable"


def test_default_name_is_function_name(registry):
    assert registry.is_registered("unencodable")
    assert sorted(registry.methods) == ["ping", "show", "unencodable"]


def test_entry_describes_shape(registry):
    assert registry.get("show").params_shape is ParamsIded
    assert registry.get("show").takes_params
    assert not registry.get("ping").takes_params
    assert registry.get("nope") is None


def test_frozen_registry_rejects_registration(registry):
    assert registry.frozen

    async def late(ctx, mm):
        return None

    with pytest.raises(RuntimeError):
        registry.handler("late")(late)
    with pytest.raises(TypeError):
        registry.entries["late"] = MethodEntry(name="late", fn=late)


def test_duplicate_registration_rejected():
    registry = Registry()

    async def a(ctx, mm):
        return None

    registry.handler("dup")(a)
    with pytest.raises(ValueError, match="dup"):
        registry.handler("dup")(a)


def test_freeze_is_idempotent():
    registry = Registry()
    assert registry.freeze() is registry.freeze()
