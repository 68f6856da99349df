"""
Configuration settings - edit values directly here or override via environment
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings - configure values below"""

    # ===================
    # Node RPC
    # ===================
    rpc_url: str = "ws://localhost:8546"
    rpc_username: Optional[str] = None
    rpc_password: Optional[str] = None

    # ===================
    # Block iterator
    # ===================
    blocks_read_per_epoch: int = 1000
    reorg_rewind_depth: int = 0
    retry_interval: float = 12.0  # seconds
    max_retries: Optional[int] = None  # None = retry forever

    @classmethod
    def from_env(cls, prefix: str = "BLOCKCURSOR_") -> "Settings":
        """Build settings, taking any PREFIX_<FIELD> environment variable over the default."""
        defaults = cls()

        def env(name: str) -> Optional[str]:
            value = os.environ.get(prefix + name.upper())
            return value if value not in (None, "") else None

        max_retries = env("max_retries")
        return cls(
            rpc_url=env("rpc_url") or defaults.rpc_url,
            rpc_username=env("rpc_username") or defaults.rpc_username,
            rpc_password=env("rpc_password") or defaults.rpc_password,
            blocks_read_per_epoch=int(env("blocks_read_per_epoch") or defaults.blocks_read_per_epoch),
            reorg_rewind_depth=int(env("reorg_rewind_depth") or defaults.reorg_rewind_depth),
            retry_interval=float(env("retry_interval") or defaults.retry_interval),
            max_retries=int(max_retries) if max_retries is not None else defaults.max_retries,
        )


# Global settings instance - import this
settings = Settings.from_env()
