"""
Execution substrate for blocking network calls.

The trusted clock never performs a blocking NTP query on the caller's thread
or event loop. Queries are submitted to a ``BlockingExecutor``: any object
with a ``concurrent.futures``-style ``submit`` (so a host application's own
``ThreadPoolExecutor`` can be injected), or the shared
``ThreadPoolBlockingExecutor`` created lazily once per process.

Design:
- Every call is bounded by a timeout; a timed-out call is abandoned, not
  interrupted, and its worker thread finishes in the background
- Async callers await the work through ``asyncio.wrap_future`` so the event
  loop keeps running other tasks while the query is in flight
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class BlockingExecutor(Protocol):
    """Anything able to run a callable on another thread."""

    def submit(
        self, fn: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> concurrent.futures.Future[T]: ...


class ThreadPoolBlockingExecutor:
    """Lazily started thread pool dedicated to blocking I/O.

    Usage:
        executor = ThreadPoolBlockingExecutor(max_workers=2)
        value = call_blocking(executor, query, "pool.ntp.org", timeout=3.0)
        executor.shutdown()
    """

    def __init__(
        self, *, max_workers: int = 4, thread_name_prefix: str = "anchorjwt"
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._max_workers = max_workers
        self._prefix = thread_name_prefix
        self._pool: concurrent.futures.ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def started(self) -> bool:
        return self._pool is not None

    def submit(
        self, fn: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> concurrent.futures.Future[T]:
        return self._ensure_pool().submit(fn, *args, **kwargs)

    def shutdown(self, *, wait: bool = False) -> None:
        with self._lock:
            self._closed = True
            pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=wait, cancel_futures=True)

    def _ensure_pool(self) -> concurrent.futures.ThreadPoolExecutor:
        pool = self._pool
        if pool is not None:
            return pool
        with self._lock:
            if self._closed:
                raise RuntimeError("Executor is closed")
            if self._pool is None:
                self._pool = concurrent.futures.ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix=self._prefix,
                )
            return self._pool


async def run_blocking(
    executor: BlockingExecutor,
    fn: Callable[..., T],
    *args: Any,
    timeout: float | None = None,
) -> T:
    """Run ``fn`` on ``executor`` and await it without blocking the loop.

    Raises:
        asyncio.TimeoutError: If ``timeout`` elapses first.
    """
    future = asyncio.wrap_future(executor.submit(fn, *args))
    if timeout is None:
        return await future
    return await asyncio.wait_for(future, timeout=timeout)


def call_blocking(
    executor: BlockingExecutor,
    fn: Callable[..., T],
    *args: Any,
    timeout: float | None = None,
) -> T:
    """Run ``fn`` on ``executor`` and wait for it from a synchronous caller.

    Raises:
        concurrent.futures.TimeoutError: If ``timeout`` elapses first.
    """
    future = executor.submit(fn, *args)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        future.cancel()
        raise


_default_executor: ThreadPoolBlockingExecutor | None = None
_default_lock = threading.Lock()


def get_default_executor(max_workers: int = 4) -> ThreadPoolBlockingExecutor:
    """Return the process-wide executor, creating it on first use."""
    global _default_executor
    executor = _default_executor
    if executor is not None:
        return executor
    with _default_lock:
        if _default_executor is None:
            _default_executor = ThreadPoolBlockingExecutor(max_workers=max_workers)
        return _default_executor


def shutdown_default_executor() -> None:
    global _default_executor
    with _default_lock:
        executor, _default_executor = _default_executor, None
    if executor is not None:
        executor.shutdown(wait=False)
