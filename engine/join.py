"""
Join/barrier for concurrent operations.

All awaitables are dispatched before any of them can complete; the joined
operation finishes once every one has reported, in whatever order.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Set

logger = logging.getLogger(__name__)


def fire_and_forget(operation: Awaitable[Any], registry: Set[asyncio.Future], label: str = "task") -> asyncio.Future:
    """
    Dispatch without awaiting. The future is kept in `registry` until done so it is
    not garbage-collected mid-flight; failures are logged, not raised.
    """
    future = asyncio.ensure_future(operation)
    registry.add(future)

    def _done(f: asyncio.Future) -> None:
        registry.discard(f)
        if f.cancelled():
            return
        exc = f.exception()
        if exc is not None:
            logger.error("Background %s failed", label, exc_info=exc)

    future.add_done_callback(_done)
    return future


async def join(*operations: Awaitable[Any], callback: Optional[Callable[[List[Any]], Any]] = None) -> List[Any]:
    """
    Run `operations` concurrently and return their results in argument order.

    `callback(results)` is invoked exactly once, after all succeeded. If any operation
    raised, the others are still awaited and the first error is re-raised instead.
    """
    results = await asyncio.gather(*operations, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    if callback is not None:
        callback(results)
    return results
