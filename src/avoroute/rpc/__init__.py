"""Chain RPC access: JSON-RPC transport and contract call encoding."""

from avoroute.rpc.client import ChainRpcClient, RpcPool

__all__ = [
    "ChainRpcClient",
    "RpcPool",
]
