# -*- coding: utf-8 -*-
"""
limiter.py - Priority-aware rate limiter for engine calls

A single gate shared by every translation request in the process:
- at most ``max_concurrent`` calls in flight
- at least ``min_interval`` seconds between two call starts
- queued calls are released most urgent first (lower priority value),
  FIFO among equal priorities

Usage:
    limiter = PriorityRateLimiter(max_concurrent=5, min_interval=0.2)
    result = await limiter.schedule(engine.translate, texts, priority=3)
"""

import asyncio
import heapq
import itertools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .constants import DEEPL_PRIORITY_DEFAULT

logger = logging.getLogger(__name__)


class PriorityRateLimiter:
    """Bounded worker gate with a priority queue in front of it."""

    def __init__(self, max_concurrent: int = 5, min_interval: float = 0.2):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self.min_interval = max(0.0, min_interval)
        self._queue: List[Tuple[int, int, asyncio.Future]] = []
        self._counter = itertools.count()
        self._running = 0
        self._next_start = 0.0
        self._pump_task: Optional[asyncio.Task] = None
        self._slot_freed: Optional[asyncio.Event] = None

    def counts(self) -> Dict[str, int]:
        queued = sum(1 for _, _, waiter in self._queue if not waiter.done())
        return {"queued": queued, "running": self._running}

    async def schedule(self, func: Callable[..., Awaitable[Any]], *args: Any,
                       priority: Optional[int] = None, **kwargs: Any) -> Any:
        """Run ``func(*args, **kwargs)`` once the gate lets it through."""
        if priority is None:
            priority = DEEPL_PRIORITY_DEFAULT
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        heapq.heappush(self._queue, (priority, next(self._counter), waiter))
        self._wake()

        try:
            await waiter
        except asyncio.CancelledError:
            # Granted a slot but cancelled before starting: hand it back
            if waiter.done() and not waiter.cancelled():
                self._release()
            raise

        try:
            return await func(*args, **kwargs)
        finally:
            self._release()

    def _release(self) -> None:
        self._running -= 1
        self._wake()

    def _wake(self) -> None:
        if self._slot_freed is not None:
            self._slot_freed.set()
        if self._queue and (self._pump_task is None or self._pump_task.done()):
            # One event per pump task, bound to the running loop
            self._slot_freed = asyncio.Event()
            self._pump_task = asyncio.get_running_loop().create_task(self._pump())

    async def _pump(self) -> None:
        loop = asyncio.get_running_loop()
        while self._queue:
            if self._running >= self.max_concurrent:
                self._slot_freed.clear()
                await self._slot_freed.wait()
                continue

            delay = self._next_start - loop.time()
            if delay > 0:
                # Re-check the queue afterwards: a more urgent call may have arrived
                await asyncio.sleep(delay)
                continue

            _, _, waiter = heapq.heappop(self._queue)
            if waiter.done():
                continue
            self._running += 1
            self._next_start = loop.time() + self.min_interval
            waiter.set_result(None)


_shared_limiter: Optional[PriorityRateLimiter] = None


def get_shared_limiter(max_concurrent: int = 5, min_interval: float = 0.2) -> PriorityRateLimiter:
    """Return the process-wide limiter, creating it on first use."""
    global _shared_limiter
    if _shared_limiter is None:
        _shared_limiter = PriorityRateLimiter(max_concurrent, min_interval)
    elif (_shared_limiter.max_concurrent, _shared_limiter.min_interval) != (max_concurrent, max(0.0, min_interval)):
        logger.warning(
            "Shared limiter already configured (max_concurrent=%s, min_interval=%s); ignoring new settings",
            _shared_limiter.max_concurrent, _shared_limiter.min_interval,
        )
    return _shared_limiter


def reset_shared_limiter() -> None:
    global _shared_limiter
    _shared_limiter = None
