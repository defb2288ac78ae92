"""Bounded fan-out for per-chunk provider calls.

Work is executed by a fixed-size thread pool. Submission blocks once
``max_workers + queue_size`` tasks are in flight, so a large document never
queues thousands of pending provider calls at once.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_MAX_WORKERS = 10
DEFAULT_QUEUE_SIZE = 32


def bounded_map(
    fn: Callable[[T], R],
    items: Sequence[T],
    max_workers: int = DEFAULT_MAX_WORKERS,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> list[R]:
    """Apply ``fn`` to every item with bounded parallelism.

    Args:
        fn: Function to run for each item.
        items: Inputs. Results come back in the same order.
        max_workers: Number of worker threads.
        queue_size: Extra tasks allowed to wait for a free worker.

    Returns:
        ``[fn(item) for item in items]``, computed concurrently.

    Raises:
        The first exception raised by ``fn``. Tasks not yet started are
        cancelled and no further tasks are submitted.
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")
    if queue_size < 0:
        raise ValueError(f"queue_size must be >= 0, got {queue_size}")

    if not items:
        return []
    if len(items) == 1 or max_workers == 1:
        return [fn(item) for item in items]

    slots = threading.BoundedSemaphore(max_workers + queue_size)
    failed = threading.Event()
    futures: list[Future[R]] = []

    def _release(_: Future[R]) -> None:
        slots.release()

    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
        for item in items:
            slots.acquire()
            if failed.is_set():
                slots.release()
                break
            future = pool.submit(fn, item)
            future.add_done_callback(_release)
            future.add_done_callback(
                lambda f: failed.set() if not f.cancelled() and f.exception() else None
            )
            futures.append(future)

        if failed.is_set():
            for future in futures:
                future.cancel()

    # Recombine by submission index, not by completion order.
    results: list[R] = []
    for future in futures:
        if future.cancelled():
            continue
        exc = future.exception()
        if exc is not None:
            raise exc
        results.append(future.result())

    return results
