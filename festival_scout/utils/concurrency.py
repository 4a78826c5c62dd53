"""Bounded-concurrency helpers shared by the services.

``throttled_gather`` is a drop-in replacement for ``asyncio.gather`` that
wraps each awaitable in a semaphore acquire/release, used when fanning out
repository lookups or catalog searches for a whole lineup.

``fire_and_forget`` schedules a coroutine without awaiting it (cache
invalidation after writes, background re-crawls) while keeping a strong
reference to the task until it finishes and logging any failure.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Coroutine, TypeVar

import structlog

from festival_scout.utils.logging import get_logger

_T = TypeVar("_T")

_DEFAULT_LIMIT = 5

# Strong references to in-flight background tasks; the event loop only
# keeps weak ones.
_BACKGROUND_TASKS: set[asyncio.Task] = set()

_logger: structlog.BoundLogger = get_logger(__name__)


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore for concurrency control.  A fresh semaphore of
        size 5 is created per call when omitted.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(_DEFAULT_LIMIT)

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


def fire_and_forget(coro: Coroutine, description: str) -> asyncio.Task:
    """Schedule *coro* on the running loop without awaiting it.

    Failures are logged under *description* and never propagate to the
    caller that scheduled the task.
    """
    task = asyncio.create_task(coro)
    _BACKGROUND_TASKS.add(task)

    def _done(finished: asyncio.Task) -> None:
        _BACKGROUND_TASKS.discard(finished)
        if finished.cancelled():
            return
        exc = finished.exception()
        if exc is not None:
            _logger.warning("background_task_failed", task=description, error=str(exc))

    task.add_done_callback(_done)
    return task


async def drain_background_tasks() -> None:
    """Await every background task scheduled so far (used at shutdown and in tests)."""
    while _BACKGROUND_TASKS:
        await asyncio.gather(*list(_BACKGROUND_TASKS), return_exceptions=True)
