"""Concurrency control utilities for async operations."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from marktasks.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class ConcurrencyLimiter:
    """Bounds the number of operations in flight."""

    max_concurrent: int
    _semaphore: asyncio.Semaphore = field(init=False)
    _running: int = field(default=0)

    def __post_init__(self):
        self._semaphore = asyncio.Semaphore(self.max_concurrent)

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self._running += 1

    def release(self) -> None:
        self._semaphore.release()
        self._running -= 1

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.release()

    @property
    def running(self) -> int:
        """Get number of running operations."""
        return self._running


async def gather_limited(
    func: Callable[..., Awaitable[T]],
    items: Iterable[Any],
    max_concurrent: int,
) -> list[T]:
    """Run ``func(item)`` for every item, at most *max_concurrent* at a time.

    Results keep the order of *items*. The first exception propagates once every call has
    been scheduled; nothing is rolled back.

    Args:
        func: Coroutine function taking one item.
        items: Arguments.
        max_concurrent: Upper bound on calls in flight.

    Returns:
        List of results.
    """

    limiter = ConcurrencyLimiter(max_concurrent)

    async def _wrapped(item: Any) -> T:
        async with limiter:
            return await func(item)

    return list(await asyncio.gather(*(_wrapped(item) for item in items)))
