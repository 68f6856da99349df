"""Reorg-aware block batch iterator."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from blockcursor.types import Header

from .accessor import BlockNotFoundError, ChainAccessor
from .backoff import ConstantBackoff
from .errors import (
    ChainIDError,
    ConfigError,
    HeaderLookupError,
    IterationCancelledError,
    ReorgCheckError,
)

logger = logging.getLogger(__name__)

DEFAULT_BLOCKS_READ_PER_EPOCH = 1000
DEFAULT_RETRY_INTERVAL = 12.0  # seconds


class EpochSignal(Enum):
    """Outcome of one successful epoch. Failures are raised instead."""
    CONTINUE = "continue"
    RANGE_EXHAUSTED = "range_exhausted"


@dataclass(frozen=True)
class BatchResult:
    """
    What the callback hands back after a batch.

    current replaces the iterator cursor when update_current is set, taking
    precedence over the batch boundary the iterator would otherwise move to.
    end stops the iteration once the current epoch finishes.
    """
    current: Optional[Header] = None
    update_current: bool = False
    end: bool = False

    @classmethod
    def rewind(cls, header: Header) -> "BatchResult":
        return cls(current=header, update_current=True)

    @classmethod
    def stop(cls) -> "BatchResult":
        return cls(end=True)


# on_blocks(start, end) -> Optional[BatchResult]; raise to fail the epoch
OnBlocksFunc = Callable[[Header, Header], Awaitable[Optional[BatchResult]]]


@dataclass(frozen=True)
class IteratorConfig:
    """Block batch iterator settings. Unset optionals fall back to the defaults above."""
    client: Optional[ChainAccessor] = None
    start_height: Optional[int] = None
    on_blocks: Optional[OnBlocksFunc] = None
    end_height: Optional[int] = None
    blocks_read_per_epoch: Optional[int] = None
    reverse: bool = False
    reorg_rewind_depth: Optional[int] = None
    retry_interval: Optional[float] = None
    max_retries: Optional[int] = None

    def validate(self) -> None:
        """Raise ConfigError on anything unusable. Makes no network calls."""
        if self.client is None:
            raise ConfigError("invalid RPC client")
        if self.on_blocks is None:
            raise ConfigError("invalid callback")
        if self.start_height is None or self.start_height < 0:
            raise ConfigError(f"invalid start height: {self.start_height}")
        if self.end_height is not None and self.end_height < 0:
            raise ConfigError(f"invalid end height: {self.end_height}")
        if self.reverse and self.end_height is None:
            raise ConfigError("missing end height")
        if self.end_height is not None and self.start_height > self.end_height:
            raise ConfigError(f"start height ({self.start_height}) > end height ({self.end_height})")
        if self.blocks_read_per_epoch is not None and self.blocks_read_per_epoch <= 0:
            raise ConfigError(f"invalid blocks read per epoch: {self.blocks_read_per_epoch}")
        if self.reorg_rewind_depth is not None and self.reorg_rewind_depth < 0:
            raise ConfigError(f"invalid reorg rewind depth: {self.reorg_rewind_depth}")
        if self.retry_interval is not None and self.retry_interval < 0:
            raise ConfigError(f"invalid retry interval: {self.retry_interval}")
        if self.max_retries is not None and self.max_retries < 0:
            raise ConfigError(f"invalid max retries: {self.max_retries}")


class BlockBatchIterator:
    """
    Iterates the blocks between start and end heights in batches, with
    awareness of chain reorganizations.

    Forward iteration follows the chain head when no end height is set.
    Build instances with BlockBatchIterator.create().
    """

    def __init__(
        self,
        config: IteratorConfig,
        chain_id: int,
        start_header: Header,
        end_header: Header,
        stop_event: Optional[asyncio.Event] = None,
    ):
        self.client = config.client
        self.on_blocks = config.on_blocks
        self.chain_id = chain_id
        self.start_height = config.start_height
        self.end_height = config.end_height
        self.reverse = config.reverse
        self.blocks_read_per_epoch = config.blocks_read_per_epoch or DEFAULT_BLOCKS_READ_PER_EPOCH
        self.reorg_rewind_depth = config.reorg_rewind_depth or 0
        self.retry_interval = DEFAULT_RETRY_INTERVAL if config.retry_interval is None else config.retry_interval
        self.max_retries = config.max_retries
        self._stop_event = stop_event
        self._current = end_header if config.reverse else start_header
        self._done = False
        self._failures = 0

    @classmethod
    async def create(cls, config: IteratorConfig, stop_event: Optional[asyncio.Event] = None) -> "BlockBatchIterator":
        """
        Validate config and fetch the boundary headers.

        Without an end height the end header is the latest block.
        """
        config.validate()

        try:
            chain_id = await config.client.chain_id()
        except Exception as e:
            raise ChainIDError(f"failed to get chain ID: {e}") from e

        try:
            start_header = await config.client.header_by_number(config.start_height)
        except Exception as e:
            raise HeaderLookupError(f"failed to get start header, height: {config.start_height}: {e}") from e

        try:
            end_header = await config.client.header_by_number(config.end_height)
        except Exception as e:
            raise HeaderLookupError(f"failed to get end header, height: {config.end_height}: {e}") from e

        return cls(config, chain_id, start_header, end_header, stop_event)

    @property
    def current(self) -> Header:
        return self._current

    @property
    def is_done(self) -> bool:
        return self._done

    @property
    def stopped(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    async def iter(self, backoff: Optional[ConstantBackoff] = None) -> None:
        """
        Walk the configured range, calling on_blocks once per batch.

        Failed epochs are retried after one backoff interval. A bounded backoff
        counts consecutive failures only, every successful epoch resets it.
        Returns when the range is exhausted or the callback ends the iteration.

        Raises:
            IterationCancelledError: the stop event was set
            Exception: the last epoch error once a bounded backoff gives up
        """
        policy = backoff or ConstantBackoff(self.retry_interval, self.max_retries)
        epoch = self._reverse_epoch if self.reverse else self._epoch

        self._failures = 0
        while True:
            try:
                await self._run_epochs(epoch)
                break
            except Exception as e:
                logger.error(f"Block batch iterator callback error: {e}")
                if self.stopped:
                    break
                if not policy.allows_retry(self._failures):
                    raise
            self._failures += 1
            await policy.wait(self._stop_event)

        if self.stopped:
            raise IterationCancelledError(f"block batch iterator stopped at {self._current}")

    async def _run_epochs(self, epoch: Callable[[], Awaitable[EpochSignal]]) -> None:
        while True:
            if self.stopped:
                logger.warning(
                    f"Block batch iterator closed: start={self.start_height} "
                    f"end={self.end_height} current={self._current.number}"
                )
                return
            signal = await epoch()
            self._failures = 0
            if signal is EpochSignal.RANGE_EXHAUSTED:
                return

    async def _epoch(self) -> EpochSignal:
        """Process one forward batch (current, end]."""
        if self._done or (self.end_height is not None and self._current.number >= self.end_height):
            return EpochSignal.RANGE_EXHAUSTED

        await self._ensure_current_not_reorged()

        if self.end_height is not None:
            dest_height = self.end_height
        else:
            dest_height = await self.client.block_number()

        if self._current.number >= dest_height:
            return EpochSignal.RANGE_EXHAUSTED

        end_height = self._current.number + self.blocks_read_per_epoch
        is_last_epoch = False
        if end_height >= dest_height:
            end_height = dest_height
            is_last_epoch = True

        end_header = await self.client.header_by_number(end_height)
        result = await self.on_blocks(self._current, end_header)
        self._settle(result, end_header)

        if self._done or is_last_epoch:
            return EpochSignal.RANGE_EXHAUSTED
        return EpochSignal.CONTINUE

    async def _reverse_epoch(self) -> EpochSignal:
        """Process one backward batch [start, current)."""
        if self._done or self._current.number <= self.start_height:
            return EpochSignal.RANGE_EXHAUSTED

        await self._ensure_current_not_reorged()

        if self._current.number <= self.start_height:
            return EpochSignal.RANGE_EXHAUSTED

        start_height = max(self._current.number - self.blocks_read_per_epoch, 0)
        is_last_epoch = False
        if start_height <= self.start_height:
            start_height = self.start_height
            is_last_epoch = True

        start_header = await self.client.header_by_number(start_height)
        result = await self.on_blocks(start_header, self._current)
        self._settle(result, start_header)

        if self._done or is_last_epoch:
            return EpochSignal.RANGE_EXHAUSTED
        return EpochSignal.CONTINUE

    def _settle(self, result: Optional[BatchResult], boundary: Header) -> None:
        """Move the cursor after a successful callback."""
        if result is not None and result.end:
            self._done = True

        if result is not None and result.update_current:
            if result.current is not None:
                self._current = result.current
                return
            logger.warning("Received a None header as iterator cursor")

        # An ended iteration keeps its cursor unless the callback moved it
        if not self._done:
            self._current = boundary

    async def _ensure_current_not_reorged(self) -> None:
        """
        Check the cursor is still canonical, rewinding reorg_rewind_depth
        blocks if it is not.

        Reorgs inside a batch are left to the callback, which rewinds
        through BatchResult.rewind().
        """
        try:
            await self.client.header_by_hash(self._current.hash)
            return
        except BlockNotFoundError:
            logger.info(f"Iterator cursor {self._current} reorged, rewinding {self.reorg_rewind_depth} blocks")
        except Exception as e:
            raise ReorgCheckError(f"failed to check whether iterator cursor has been reorged: {e}") from e

        try:
            await self._rewind_on_reorg_detected()
        except Exception as e:
            raise ReorgCheckError(f"failed to rewind reorged iterator cursor {self._current}: {e}") from e

    async def _rewind_on_reorg_detected(self) -> None:
        new_height = max(self._current.number - self.reorg_rewind_depth, 0)
        self._current = await self.client.header_by_number(new_height)
