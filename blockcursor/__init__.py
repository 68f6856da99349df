"""
Reorg-aware block batch cursor for rollup node and prover clients.

Structure:
    blockcursor/
    ├── types.py          # Header
    ├── blockchain/       # JSON-RPC node client
    └── sync/             # Block batch iterator, retry policy, batch processor

Usage:
    from blockcursor import Header
    from blockcursor.blockchain import EthRPCClient
    from blockcursor.sync import BlockBatchIterator, IteratorConfig, BatchResult
"""

from .types import Header

__all__ = [
    # Types
    "Header",
]
