"""Block batch iterator errors."""


class BlockIteratorError(Exception):
    """Base exception for iterator errors."""

class ConfigError(BlockIteratorError):
    """Invalid iterator configuration. Never retried."""

class ChainIDError(BlockIteratorError):
    """Chain ID could not be fetched at construction."""

class HeaderLookupError(BlockIteratorError):
    """A boundary header could not be fetched at construction."""

class ReorgCheckError(BlockIteratorError):
    """The cursor could not be checked against the canonical chain."""

class IterationCancelledError(BlockIteratorError):
    """Iteration stopped because the stop event was set."""
