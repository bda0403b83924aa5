"""
Timing Utilities for Latency Instrumentation

Provides context managers for logging execution times of pipeline nodes
and source calls, plus the race-and-discard timeout used by the fetch
nodes.
"""

import time
import asyncio
import logging
from contextlib import contextmanager, asynccontextmanager
from typing import Awaitable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def log_timing(node_name: str, action: str, duration_ms: Optional[float] = None):
    """Log a timing event in standard format."""
    if duration_ms is not None:
        print(f"[TIMING] {node_name}: {action} — duration={duration_ms:.0f}ms")
    else:
        print(f"[TIMING] {node_name}: {action}")


@asynccontextmanager
async def async_timer(node_name: str, action: str = "OPERATION"):
    """Async context manager for timing operations."""
    log_timing(node_name, f"{action} START")
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        log_timing(node_name, f"{action} END", duration_ms)


class StepTimer:
    """
    Utility class for timing multiple steps within a node.

    Usage:
        timer = StepTimer("fetch_web")
        async with timer.async_step("search_many"):
            await search_many(queries)
        timer.summary()
    """

    def __init__(self, node_name: str):
        self.node_name = node_name
        self.steps: dict[str, float] = {}
        self.start_time = time.perf_counter()

    @contextmanager
    def step(self, step_name: str):
        """Time a single step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.steps[step_name] = duration_ms
            log_timing(self.node_name, step_name, duration_ms)

    @asynccontextmanager
    async def async_step(self, step_name: str):
        """Time a single async step."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.steps[step_name] = duration_ms
            log_timing(self.node_name, step_name, duration_ms)

    def summary(self):
        """Log summary of all steps."""
        total_ms = (time.perf_counter() - self.start_time) * 1000
        log_timing(self.node_name, "TOTAL", total_ms)
        return total_ms


def _consume_outcome(task: "asyncio.Task") -> None:
    # Abandoned tasks still finish; retrieve the outcome so asyncio does
    # not report "exception was never retrieved".
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned task finished with error: %s", exc)


async def with_timeout(
    awaitable: Awaitable[T],
    seconds: float,
    fallback: T,
    label: str,
) -> Tuple[T, bool]:
    """Race *awaitable* against a deadline.

    Returns ``(result, False)`` when it finishes in time, otherwise
    ``(fallback, True)``.  The losing task is NOT cancelled: it keeps
    running in the background and its result is discarded, so any sockets
    it holds stay open until it completes on its own.

    Exceptions raised by *awaitable* before the deadline propagate.
    """
    task = asyncio.ensure_future(awaitable)
    done, _ = await asyncio.wait({task}, timeout=seconds)
    if task in done:
        return task.result(), False

    task.add_done_callback(_consume_outcome)
    log_timing(label, f"TIMEOUT after {seconds:.1f}s — using fallback")
    logger.warning("%s did not finish within %.1fs; result discarded", label, seconds)
    return fallback, True
