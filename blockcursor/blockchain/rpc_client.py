"""JSON-RPC WebSocket client for EVM chain access."""

import asyncio
import base64
import json
import logging
from typing import Any, Dict, List, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect
from websockets.protocol import State

from blockcursor.sync.accessor import BlockNotFoundError
from blockcursor.types import Header

logger = logging.getLogger(__name__)


class RPCError(Exception):
    """Base exception for RPC errors."""

class RPCConnectionError(RPCError):
    """Connection-related errors."""

class RPCQueryError(RPCError):
    """Query-related errors."""

class HeaderNotFoundError(RPCQueryError, BlockNotFoundError):
    """The node has no block for the requested number or hash."""


class EthRPCClient:
    """Async client for the Ethereum JSON-RPC API over WebSocket."""

    def __init__(self, url: str = "ws://localhost:8546", username: Optional[str] = None, password: Optional[str] = None):
        self.url = url
        self.username = username
        self.password = password
        self._ws: Optional[ClientConnection] = None
        self._request_id = 0

    def _get_headers(self) -> Dict[str, str]:
        if self.username and self.password:
            encoded = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
            return {"Authorization": f"Basic {encoded}"}
        return {}

    async def connect(self) -> bool:
        """Connect to the node. Returns True on success."""
        try:
            headers = self._get_headers()
            # Blocks carry every transaction hash even without bodies, busy L1 blocks run large
            connect_kwargs: Dict[str, Any] = {"max_size": 16 * 1024 * 1024}
            if headers:
                connect_kwargs["additional_headers"] = headers
            self._ws = await connect(self.url, **connect_kwargs)
            logger.info(f"Connected to node at {self.url}")
            return True
        except ConnectionRefusedError:
            logger.error(f"Connection refused. Is WebSocket RPC enabled on the node at {self.url}?")
            return False
        except (OSError, websockets.InvalidHandshake, websockets.InvalidURI) as e:
            logger.error(f"Failed to open RPC WebSocket to {self.url}: {e}")
            return False

    async def disconnect(self):
        if self._ws:
            await self._ws.close()
            self._ws = None
            logger.info("Disconnected from node")

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN

    async def __aenter__(self):
        if not await self.connect():
            raise RPCConnectionError(f"Failed to connect to {self.url}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _send_request(self, method: str, params: Optional[List[Any]] = None, timeout: float = 30.0) -> Any:
        """Send JSON-RPC request and wait for the matching response."""
        if not self._ws:
            raise RPCConnectionError("Not connected to node")

        request_id = self._next_request_id()
        request = {"jsonrpc": "2.0", "method": method, "params": params or [], "id": request_id}

        try:
            await self._ws.send(json.dumps(request))
            while True:
                response = json.loads(await asyncio.wait_for(self._ws.recv(), timeout=timeout))
                # Stale replies from a timed-out request may still be queued
                if response.get("id") == request_id:
                    break
                logger.debug(f"Dropping response for request {response.get('id')}")
        except asyncio.TimeoutError:
            raise RPCQueryError(f"Request timed out after {timeout}s: {method}")
        except websockets.ConnectionClosed as e:
            raise RPCConnectionError(f"Connection lost during {method}: {e}") from e
        except (OSError, ValueError) as e:
            raise RPCQueryError(f"Request failed: {e}") from e

        if "error" in response:
            err = response["error"]
            raise RPCQueryError(f"RPC error: {err.get('message', err) if isinstance(err, dict) else err}")
        if "result" in response:
            return response["result"]
        raise RPCQueryError(f"Malformed response to {method}: {response}")

    async def chain_id(self) -> int:
        result = await self._send_request("eth_chainId")
        return int(result, 16)

    async def block_number(self) -> int:
        """Query current chain head height."""
        result = await self._send_request("eth_blockNumber")
        return int(result, 16)

    async def header_by_number(self, number: Optional[int] = None) -> Header:
        """Fetch a header by height, None means latest."""
        tag = "latest" if number is None else hex(number)
        block = await self._send_request("eth_getBlockByNumber", [tag, False])
        if block is None:
            raise HeaderNotFoundError(f"No block at height {tag}")
        return Header.from_rpc(block)

    async def header_by_hash(self, block_hash: str) -> Header:
        block = await self._send_request("eth_getBlockByHash", [block_hash, False])
        if block is None:
            raise HeaderNotFoundError(f"No block with hash {block_hash}")
        return Header.from_rpc(block)

    async def health_check(self) -> Dict[str, Any]:
        try:
            head = await self.header_by_number()
            return {"status": "healthy", "connected": True, "head": {"number": head.number, "hash": head.hash}}
        except RPCError as e:
            return {"status": "unhealthy", "connected": False, "error": str(e)}
