"""Tests for the gateway client.

Tests use ``httpx.ASGITransport`` pointed at the real Starlette app
so we get a genuine HTTP-level integration without starting a server.
"""

import httpx
import pytest
from rpcclient import GatewayClient, RpcCallError
from tenacity import wait_none


@pytest.fixture
async def gateway(app):
    """GatewayClient wired to the in-process Starlette app."""
    transport = httpx.ASGITransport(app=app)  # type: ignore[arg-type]
    client = GatewayClient(base_url="http://test", transport=transport)
    yield client
    await client.close()


@pytest.mark.anyio
async def test_call_list_tasks(gateway):
    result = await gateway.call("list_tasks")
    assert result == {"data": []}


@pytest.mark.anyio
async def test_create_and_show(gateway):
    task = await gateway.create_task({"title": "hello"})
    assert task == {"id": 1000, "title": "hello", "done": False}
    assert await gateway.show_task(task["id"]) == task


@pytest.mark.anyio
async def test_update_and_delete(gateway):
    task = await gateway.create_task({"title": "a"})
    updated = await gateway.update_task(task["id"], {"title": "b"})
    assert updated["title"] == "b"

    deleted = await gateway.delete_task(task["id"])
    assert deleted == updated
    assert await gateway.list_tasks() == []


@pytest.mark.anyio
async def test_call_method_not_found(gateway):
    with pytest.raises(RpcCallError) as exc_info:
        await gateway.call("does_not_exist")
    assert exc_info.value.error.code == -32601
    assert exc_info.value.kind == "MethodUnknown"
    assert exc_info.value.status_code == 400


@pytest.mark.anyio
async def test_call_invalid_params(gateway):
    with pytest.raises(RpcCallError) as exc_info:
        await gateway.call("show_task", {"id": "1"})
    assert exc_info.value.kind == "InvalidParams"


@pytest.mark.anyio
async def test_non_envelope_response_raises_http_error(gateway):
    gateway.rpc_path = "/nowhere"
    with pytest.raises(httpx.HTTPStatusError):
        await gateway.call("list_tasks")


@pytest.mark.anyio
async def test_network_errors_are_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    client = GatewayClient(
        base_url="http://test", max_retries=2, transport=httpx.MockTransport(handler)
    )
    client._get_retrier = _no_wait(client._get_retrier)
    async with client:
        with pytest.raises(httpx.ConnectError):
            await client.call("list_tasks")
    assert len(attempts) == 2


def _no_wait(make_retrier):
    def wrapper():
        retrier = make_retrier()
        return retrier.copy(wait=wait_none())

    return wrapper
