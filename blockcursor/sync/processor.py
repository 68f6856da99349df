"""Default on_blocks callback: log batches and guard against in-batch reorgs."""

import logging
from typing import Any, Dict, List, Optional

from blockcursor.types import Header

from .accessor import ChainAccessor
from .block_iterator import BatchResult

logger = logging.getLogger(__name__)


class BatchProcessor:
    """
    Processes header batches handed over by BlockBatchIterator.

    With a client, every batch is checked for a reorg under its lower
    boundary: the block right above it must name it as parent. On mismatch
    the cursor is rewound rewind_depth blocks below the boundary. Pass no
    client when iterating in reverse.
    """

    def __init__(
        self,
        client: Optional[ChainAccessor] = None,
        rewind_depth: int = 0,
        max_batches: Optional[int] = None,
    ):
        self.client = client
        self.rewind_depth = rewind_depth
        self.max_batches = max_batches
        self.batches: List[Dict[str, Any]] = []
        self.stats = {
            "batches_processed": 0,
            "blocks_covered": 0,
            "reorgs_detected": 0,
        }

    async def __call__(self, start: Header, end: Header) -> Optional[BatchResult]:
        return await self.process_batch(start, end)

    async def process_batch(self, start: Header, end: Header) -> Optional[BatchResult]:
        """
        Process a single batch.

        Returns:
            BatchResult when the cursor must move or iteration must end, else None
        """
        logger.info(f"Processing batch {start.number} -> {end.number} ({end.number - start.number} blocks)")

        if self.client is not None and await self._reorged_below(start, end):
            self.stats["reorgs_detected"] += 1
            new_height = max(start.number - self.rewind_depth, 0)
            logger.warning(f"Reorg detected above block {start.number}, rewinding cursor to {new_height}")
            return BatchResult.rewind(await self.client.header_by_number(new_height))

        self.batches.append({"start": start.number, "end": end.number, "end_hash": end.hash})
        self.stats["batches_processed"] += 1
        self.stats["blocks_covered"] += end.number - start.number

        if self.max_batches is not None and self.stats["batches_processed"] >= self.max_batches:
            logger.info(f"Reached {self.max_batches} batches, ending iteration")
            return BatchResult.stop()
        return None

    async def _reorged_below(self, start: Header, end: Header) -> bool:
        if end.number <= start.number:
            return False
        child = await self.client.header_by_number(start.number + 1)
        return child.parent_hash != start.hash
