"""Run per-item coroutines with a cap on how many are in flight."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_bounded(
    items: Iterable[T],
    func: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[R | Exception]:
    """
    Await func(item) for every item, at most `limit` at a time.
    Results keep input order; an item that raised yields its exception instead.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return await asyncio.gather(*(run(item) for item in items), return_exceptions=True)
