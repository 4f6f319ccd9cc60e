"""
Bounded-parallelism map over a collection.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def map_limited(
    items: Iterable[T],
    limit: int,
    fn: Callable[[T], Awaitable[R]],
) -> List[R]:
    """
    Apply ``fn`` to every item with at most ``limit`` calls in flight.

    ``min(limit, len(items))`` workers each claim the next unprocessed index
    and store the result at that index, so the output order always matches
    the input order. The first failure cancels the remaining workers and is
    re-raised.

    Args:
        items: Inputs to process.
        limit: Maximum number of concurrent ``fn`` calls.
        fn: Coroutine function applied to each item.

    Returns:
        Results in input order.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    pending = list(items)
    if not pending:
        return []

    results: List[Optional[R]] = [None] * len(pending)
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while True:
            # Claim and increment with no await in between; the event loop
            # cannot interleave another worker here.
            index = next_index
            if index >= len(pending):
                return
            next_index += 1
            results[index] = await fn(pending[index])

    workers = [asyncio.ensure_future(worker()) for _ in range(min(limit, len(pending)))]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        raise

    logger.debug(f"map_limited processed {len(pending)} items with {len(workers)} workers")
    return results  # type: ignore[return-value]


class ConcurrencyLimiter:
    """Reusable holder for a concurrency limit."""

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit

    async def map(self, items: Iterable[T], fn: Callable[[T], Awaitable[R]]) -> List[R]:
        """Apply ``fn`` to every item, at most ``limit`` at a time, preserving order."""
        return await map_limited(items, self.limit, fn)
