"""
Fan-out/join helper.

Every item is run as its own task; a task that raises or times out is
turned into a result by `on_error` inside that task. The call returns only
after all tasks have settled, with results in input order.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from .telemetry import elapsed_ms


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def fan_out_join(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    on_error: Callable[[T, BaseException, int], R],
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> list[R]:
    """
    Run `worker` over `items` concurrently and wait for all of them.

    Args:
        items: Inputs, one task each
        worker: Coroutine function producing a result for one item
        on_error: Converts (item, exception, elapsed_ms) into a result
        max_concurrency: Upper bound on tasks in flight (None = unbounded)
        timeout: Per-task timeout in seconds (None = no timeout)

    Returns:
        One result per item, index-aligned with `items`
    """
    if not items:
        return []

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
    results: list[Optional[R]] = [None] * len(items)

    async def run_one(index: int, item: T):
        if semaphore is not None:
            async with semaphore:
                results[index] = await _settle(item, worker, on_error, timeout)
        else:
            results[index] = await _settle(item, worker, on_error, timeout)

    await asyncio.gather(*(run_one(i, item) for i, item in enumerate(items)))
    return results


async def _settle(item, worker, on_error, timeout):
    started = time.perf_counter()
    try:
        if timeout is None:
            return await worker(item)

        # Only the deadline counts as a timeout; a TimeoutError raised by the
        # worker itself is reported with its own message.
        task = asyncio.ensure_future(worker(item))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        finally:
            if not task.done():
                task.cancel()
        if not done:
            elapsed = elapsed_ms(started)
            logger.warning(f"Task timed out after {elapsed}ms")
            return on_error(item, TimeoutError(f"Timed out after {timeout}s"), elapsed)
        return task.result()
    except Exception as e:
        return on_error(item, e, elapsed_ms(started))
