"""Shared test utilities: an in-memory chain accessor."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Optional

import pytest

from blockcursor.blockchain import HeaderNotFoundError
from blockcursor.sync import BatchResult
from blockcursor.types import Header


def block_hash(number: int, fork: str = "") -> str:
    """Deterministic hash for a block on a named fork."""
    return "0x" + hashlib.sha256(f"{fork}:{number}".encode()).hexdigest()


class FakeChain:
    """
    Canonical chain held in memory, implementing ChainAccessor.

    Every accessor call is recorded in `calls`. Failures can be scripted
    per method with fail_next().
    """

    def __init__(self, head: int = 1000, chain_id: int = 167000):
        self._chain_id = chain_id
        self.by_number: dict[int, Header] = {}
        self.by_hash: dict[str, Header] = {}
        self.calls: list[tuple[str, object]] = []
        self._failures: dict[str, list[Exception]] = {}
        self.extend(head)

    @property
    def head(self) -> int:
        return max(self.by_number)

    def _add(self, number: int, fork: str) -> None:
        parent = self.by_number[number - 1].hash if number > 0 else "0x" + "00" * 32
        header = Header(number=number, hash=block_hash(number, fork), parent_hash=parent, timestamp=number * 12)
        self.by_number[number] = header
        self.by_hash[header.hash] = header

    def extend(self, head: int, fork: str = "") -> None:
        """Grow the chain up to `head`."""
        start = self.head + 1 if self.by_number else 0
        for number in range(start, head + 1):
            self._add(number, fork)

    def reorg(self, from_height: int, fork: str = "reorg") -> None:
        """Replace every block from `from_height` up to head with a new fork."""
        head = self.head
        for number in range(from_height, head + 1):
            del self.by_hash[self.by_number.pop(number).hash]
        for number in range(from_height, head + 1):
            self._add(number, fork)

    def fail_next(self, method: str, error: Exception, times: int = 1) -> None:
        self._failures.setdefault(method, []).extend([error] * times)

    def _record(self, method: str, arg: object = None) -> None:
        self.calls.append((method, arg))
        pending = self._failures.get(method)
        if pending:
            raise pending.pop(0)

    async def chain_id(self) -> int:
        self._record("chain_id")
        return self._chain_id

    async def header_by_number(self, number: Optional[int] = None) -> Header:
        self._record("header_by_number", number)
        if number is None:
            return self.by_number[self.head]
        if number not in self.by_number:
            raise HeaderNotFoundError(f"No block at height {number}")
        return self.by_number[number]

    async def header_by_hash(self, block_hash: str) -> Header:
        self._record("header_by_hash", block_hash)
        if block_hash not in self.by_hash:
            raise HeaderNotFoundError(f"No block with hash {block_hash}")
        return self.by_hash[block_hash]

    async def block_number(self) -> int:
        self._record("block_number")
        return self.head


@dataclass
class RecordingCallback:
    """on_blocks callback recording (start, end) heights; replies from a script."""

    batches: list[tuple[int, int]] = field(default_factory=list)
    replies: dict[int, object] = field(default_factory=dict)

    async def __call__(self, start: Header, end: Header) -> Optional[BatchResult]:
        index = len(self.batches)
        self.batches.append((start.number, end.number))
        reply = self.replies.pop(index, None)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(start, end)
        return reply


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def callback() -> RecordingCallback:
    return RecordingCallback()
