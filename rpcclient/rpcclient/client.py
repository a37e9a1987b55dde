"""Gateway client — thin RPC consumer.

* ``call(method, params)`` → the ``result`` of a successful call
* ``list_tasks()`` / ``create_task(data)`` / ... → task helpers

Uses ``httpx.AsyncClient`` with connection pooling; connection-level
failures are retried with ``tenacity``.  **Never** imports from ``gateway``.

Run directly for a quick demo::

    python -m rpcclient.client
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx
from rpcwire import DecodeError, RpcError, RpcRequest, decode_response
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)


class RpcCallError(Exception):
    """Raised when the gateway answers with an error envelope."""

    def __init__(self, error: RpcError, status_code: int = 200) -> None:
        self.error = error
        self.status_code = status_code
        super().__init__(f"[{error.code}] {error.message}")

    @property
    def kind(self) -> str | None:
        if isinstance(self.error.data, dict):
            return self.error.data.get("kind")
        return None


class GatewayClient:
    """Thin async client for the gateway's ``/rpc`` endpoint.

    Parameters
    ----------
    base_url : str
        Gateway origin, e.g. ``http://127.0.0.1:8100``.
    timeout : float
        Default request timeout in seconds.
    max_retries : int
        Max connection-level attempts.
    rpc_path : str
        Path of the RPC endpoint.
    transport : httpx.AsyncBaseTransport, optional
        Custom transport (e.g. ``httpx.ASGITransport`` in tests).
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8100",
        timeout: float = 30.0,
        max_retries: int = 3,
        rpc_path: str = "/rpc",
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.rpc_path = rpc_path
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers=headers,
        )

    # -- Lifecycle -----------------------------------------------------

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # -- Internal retry helper -----------------------------------------

    def _get_retrier(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
            reraise=True,
        )

    # -- Unary RPC -----------------------------------------------------

    async def call(self, method: str, params: Any = None) -> Any:
        """Send one request and return its ``result``.

        Raises ``RpcCallError`` if the gateway returns an error envelope,
        and ``httpx.HTTPStatusError`` if it returns something that is not
        an envelope at all.
        """
        req = RpcRequest(method=method, params=params, id=uuid.uuid4().hex)

        log.debug("rpc → %s(id=%s)", method, req.id)

        async for attempt in self._get_retrier():
            with attempt:
                resp = await self._client.post(self.rpc_path, json=req.to_dict())

        try:
            rpc_resp = decode_response(resp.content)
        except DecodeError:
            resp.raise_for_status()
            raise

        if rpc_resp.error is not None:
            raise RpcCallError(rpc_resp.error, resp.status_code)
        if rpc_resp.id != req.id:
            log.warning("rpc id mismatch: sent %s, got %s", req.id, rpc_resp.id)
        return rpc_resp.result

    # -- Task helpers --------------------------------------------------

    async def list_tasks(self) -> list[dict[str, Any]]:
        return (await self.call("list_tasks"))["data"]

    async def create_task(self, data: dict[str, Any]) -> dict[str, Any]:
        return (await self.call("create_task", {"data": data}))["data"]

    async def show_task(self, id: int) -> dict[str, Any]:
        return (await self.call("show_task", {"id": id}))["data"]

    async def update_task(self, id: int, data: dict[str, Any]) -> dict[str, Any]:
        return (await self.call("update_task", {"id": id, "data": data}))["data"]

    async def delete_task(self, id: int) -> dict[str, Any]:
        return (await self.call("delete_task", {"id": id}))["data"]


# ── Demo entrypoint ──────────────────────────────────────────────────


async def _demo() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    async with GatewayClient() as client:
        print("── create_task ──")
        task = await client.create_task({"title": "hello from client"})
        print(f"  task: {task}")

        print("── update_task ──")
        task = await client.update_task(task["id"], {"done": True})
        print(f"  task: {task}")

        print("── list_tasks ──")
        print(f"  tasks: {await client.list_tasks()}")

        print("── show_task (missing) ──")
        try:
            await client.show_task(-1)
        except RpcCallError as exc:
            print(f"  error: {exc.kind} {exc}")

        print("── done ──")


if __name__ == "__main__":
    import anyio

    anyio.run(_demo)
