"""
Core types for the block cursor.

Minimal Header type. Only the fields the cursor needs are kept.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union


def _to_int(value: Union[int, str, None]) -> int:
    """JSON-RPC quantities arrive as 0x-prefixed hex strings."""
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value, 16) if value.startswith("0x") else int(value)


@dataclass(frozen=True)
class Header:
    """
    Represents a block header on the upstream chain.

    Hashes are stored as lowercase 0x-prefixed hex.
    """
    number: int
    hash: str
    parent_hash: str = ""
    timestamp: int = 0

    @classmethod
    def from_rpc(cls, block: Dict[str, Any]) -> "Header":
        """
        Create from an eth_getBlockBy* result object.
        Transactions are ignored, only header fields are read.
        """
        return cls(
            number=_to_int(block.get("number")),
            hash=(block.get("hash") or "").lower(),
            parent_hash=(block.get("parentHash") or "").lower(),
            timestamp=_to_int(block.get("timestamp")),
        )

    def __str__(self) -> str:
        return f"#{self.number} ({self.hash[:10]})"

    def __repr__(self) -> str:
        return f"Header({self.number}, {self.hash[:10]}..)"
