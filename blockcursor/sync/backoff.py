"""Constant-interval retry policy for the iterator driver."""

import asyncio
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConstantBackoff:
    """
    Wait the same interval between every attempt.

    max_retries=None retries forever. Otherwise the driver gives up once
    max_retries consecutive retries have failed and re-raises the last error.
    """
    interval: float
    max_retries: Optional[int] = None

    def allows_retry(self, retries_done: int) -> bool:
        return self.max_retries is None or retries_done < self.max_retries

    async def wait(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Sleep one interval, returning early if stop_event gets set."""
        if stop_event is None:
            await asyncio.sleep(self.interval)
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass
