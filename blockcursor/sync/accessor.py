"""Chain accessor protocol consumed by the block batch iterator."""

from typing import Optional, Protocol

from blockcursor.types import Header


class BlockNotFoundError(LookupError):
    """The chain has no block for the requested number or hash."""


class ChainAccessor(Protocol):
    """
    Interface for chain data providers (JSON-RPC node, in-memory fake, etc.).

    Lookups that find nothing raise BlockNotFoundError (or a subclass),
    anything else raised is treated as a transient fault.
    """

    async def chain_id(self) -> int:
        ...

    async def header_by_number(self, number: Optional[int] = None) -> Header:
        """Fetch header at height, None means the latest block."""
        ...

    async def header_by_hash(self, block_hash: str) -> Header:
        ...

    async def block_number(self) -> int:
        """Current chain head height."""
        ...
