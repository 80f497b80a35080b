#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
test_limiter.py - Priority rate limiter

Test Coverage:
- Concurrency bound (Tests 1-2)
- Priority ordering (Tests 3-4)
- Minimum spacing (Test 5)
- Failure / cancellation bookkeeping (Tests 6-7)
- Shared instance (Test 8)
"""

import asyncio

import pytest

from content_translate.limiter import (
    PriorityRateLimiter,
    get_shared_limiter,
    reset_shared_limiter,
)


class _Tracker:
    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0
        self.order = []

    async def work(self, label, delay=0.0):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.order.append(label)
        try:
            await asyncio.sleep(delay)
            return label
        finally:
            self.in_flight -= 1


async def _hold(gate: asyncio.Event, started: asyncio.Event):
    started.set()
    await gate.wait()
    return "blocker"


class TestPriorityRateLimiter:

    def test_01_rejects_zero_concurrency(self):
        with pytest.raises(ValueError):
            PriorityRateLimiter(max_concurrent=0)

    @pytest.mark.asyncio
    async def test_02_max_concurrent_respected(self):
        """Never more than max_concurrent calls in flight; results keep call order."""
        limiter = PriorityRateLimiter(max_concurrent=2, min_interval=0)
        tracker = _Tracker()

        results = await asyncio.gather(*[
            limiter.schedule(tracker.work, i, 0.02) for i in range(6)
        ])

        assert results == list(range(6))
        assert tracker.max_in_flight == 2
        assert limiter.counts() == {"queued": 0, "running": 0}

    @pytest.mark.asyncio
    async def test_03_more_urgent_calls_released_first(self):
        limiter = PriorityRateLimiter(max_concurrent=1, min_interval=0)
        tracker = _Tracker()
        gate, started = asyncio.Event(), asyncio.Event()

        blocker = asyncio.create_task(limiter.schedule(_hold, gate, started, priority=5))
        await started.wait()

        low = asyncio.create_task(limiter.schedule(tracker.work, "batch", priority=7))
        await asyncio.sleep(0.01)
        high = asyncio.create_task(limiter.schedule(tracker.work, "direct", priority=3))
        await asyncio.sleep(0.01)
        assert limiter.counts() == {"queued": 2, "running": 1}

        gate.set()
        await asyncio.gather(blocker, low, high)

        assert tracker.order == ["direct", "batch"]

    @pytest.mark.asyncio
    async def test_04_fifo_within_equal_priority(self):
        limiter = PriorityRateLimiter(max_concurrent=1, min_interval=0)
        tracker = _Tracker()
        gate, started = asyncio.Event(), asyncio.Event()

        blocker = asyncio.create_task(limiter.schedule(_hold, gate, started))
        await started.wait()
        tasks = []
        for label in ("a", "b", "c"):
            tasks.append(asyncio.create_task(limiter.schedule(tracker.work, label, priority=6)))
            await asyncio.sleep(0.005)

        gate.set()
        await asyncio.gather(blocker, *tasks)

        assert tracker.order == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_05_min_interval_between_starts(self):
        limiter = PriorityRateLimiter(max_concurrent=5, min_interval=0.05)
        loop = asyncio.get_running_loop()
        starts = []

        async def stamp():
            starts.append(loop.time())

        await asyncio.gather(*[limiter.schedule(stamp) for _ in range(3)])

        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert len(gaps) == 2
        assert all(gap >= 0.04 for gap in gaps)

    @pytest.mark.asyncio
    async def test_06_failure_propagates_and_frees_slot(self):
        limiter = PriorityRateLimiter(max_concurrent=1, min_interval=0)

        async def boom():
            raise RuntimeError("engine down")

        with pytest.raises(RuntimeError, match="engine down"):
            await limiter.schedule(boom)

        assert limiter.counts()["running"] == 0
        assert await limiter.schedule(asyncio.sleep, 0, "ok") == "ok"

    @pytest.mark.asyncio
    async def test_07_cancelled_waiter_does_not_leak_slot(self):
        limiter = PriorityRateLimiter(max_concurrent=1, min_interval=0)
        gate, started = asyncio.Event(), asyncio.Event()

        blocker = asyncio.create_task(limiter.schedule(_hold, gate, started))
        await started.wait()
        waiting = asyncio.create_task(limiter.schedule(asyncio.sleep, 0, "never"))
        await asyncio.sleep(0.01)
        waiting.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiting

        gate.set()
        await blocker

        assert await limiter.schedule(asyncio.sleep, 0, "after") == "after"
        assert limiter.counts() == {"queued": 0, "running": 0}

    def test_08_shared_limiter_is_process_wide(self):
        first = get_shared_limiter(5, 0.2)
        assert get_shared_limiter(5, 0.2) is first
        # Different settings do not replace the existing instance
        assert get_shared_limiter(2, 0.0) is first
        reset_shared_limiter()
        assert get_shared_limiter(5, 0.2) is not first
