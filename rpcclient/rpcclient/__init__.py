"""rpcclient — async client for the task RPC gateway."""

from rpcclient.client import GatewayClient, RpcCallError

__all__ = ["GatewayClient", "RpcCallError"]
