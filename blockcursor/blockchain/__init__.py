"""Chain access over JSON-RPC."""

from .rpc_client import (
    EthRPCClient,
    HeaderNotFoundError,
    RPCConnectionError,
    RPCError,
    RPCQueryError,
)

__all__ = [
    "EthRPCClient",
    "HeaderNotFoundError",
    "RPCConnectionError",
    "RPCError",
    "RPCQueryError",
]
