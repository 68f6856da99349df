"""Block range iteration and batch processing."""

from .accessor import BlockNotFoundError, ChainAccessor
from .backoff import ConstantBackoff
from .block_iterator import (
    DEFAULT_BLOCKS_READ_PER_EPOCH,
    DEFAULT_RETRY_INTERVAL,
    BatchResult,
    BlockBatchIterator,
    EpochSignal,
    IteratorConfig,
    OnBlocksFunc,
)
from .errors import (
    BlockIteratorError,
    ChainIDError,
    ConfigError,
    HeaderLookupError,
    IterationCancelledError,
    ReorgCheckError,
)
from .processor import BatchProcessor

__all__ = [
    "DEFAULT_BLOCKS_READ_PER_EPOCH",
    "DEFAULT_RETRY_INTERVAL",
    "BatchProcessor",
    "BatchResult",
    "BlockBatchIterator",
    "BlockIteratorError",
    "BlockNotFoundError",
    "ChainAccessor",
    "ChainIDError",
    "ConfigError",
    "ConstantBackoff",
    "EpochSignal",
    "HeaderLookupError",
    "IterationCancelledError",
    "IteratorConfig",
    "OnBlocksFunc",
    "ReorgCheckError",
]
