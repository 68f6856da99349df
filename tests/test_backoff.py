"""Tests for the constant backoff policy."""

from __future__ import annotations

import asyncio
import time

import pytest

from blockcursor.sync import ConstantBackoff


def test_unbounded_always_retries() -> None:
    policy = ConstantBackoff(1.0)
    assert all(policy.allows_retry(n) for n in (0, 1, 10_000))


def test_bounded_stops_at_max() -> None:
    policy = ConstantBackoff(1.0, max_retries=2)
    assert policy.allows_retry(0)
    assert policy.allows_retry(1)
    assert not policy.allows_retry(2)


def test_zero_retries_never_retries() -> None:
    assert not ConstantBackoff(1.0, max_retries=0).allows_retry(0)


@pytest.mark.asyncio
async def test_wait_sleeps_interval() -> None:
    started = time.monotonic()
    await ConstantBackoff(0.05).wait()
    assert time.monotonic() - started >= 0.04


@pytest.mark.asyncio
async def test_wait_returns_early_on_stop() -> None:
    stop = asyncio.Event()
    asyncio.get_running_loop().call_later(0.01, stop.set)

    started = time.monotonic()
    await ConstantBackoff(30).wait(stop)
    assert time.monotonic() - started < 5


@pytest.mark.asyncio
async def test_wait_full_interval_when_not_stopped() -> None:
    stop = asyncio.Event()
    await ConstantBackoff(0.01).wait(stop)
    assert not stop.is_set()
