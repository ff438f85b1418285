"""
Render Executor
===============

Bounded thread pool for blocking render work, with admission control.

Renders run in worker threads so the event loop keeps serving other
requests. A semaphore caps how many renders may be submitted at once; a slot
is released when the worker thread finishes, not when the caller stops
waiting, so abandoned renders still count against capacity.

Callables run inside a copy of the caller's context, so structlog context
variables such as the request ID stay bound in worker-thread logs.
"""

import asyncio
import contextvars
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from titanium.config.logging import get_logger
from titanium.config.settings import Settings, get_settings
from titanium.core.errors import RenderError, RenderTimeoutError

logger = get_logger(__name__)

T = TypeVar("T")


class RenderExecutor:
    """Runs blocking callables on a dedicated worker pool."""

    def __init__(
        self,
        max_workers: Optional[int] = None,
        max_concurrent: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.max_workers = max_workers or self.settings.render_workers
        self.capacity = max_concurrent or self.settings.max_concurrent_renders
        self.in_flight = 0
        self.logger: Any = logger.bind(component="render_executor")
        self._executor: Optional[ThreadPoolExecutor] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

    def start(self) -> None:
        """Create the worker pool."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="render"
            )
            self._semaphore = asyncio.Semaphore(self.capacity)
            self.logger.info(
                "Render executor started", workers=self.max_workers, capacity=self.capacity
            )

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait, cancel_futures=True)
            self._executor = None
            self._semaphore = None
            self.logger.info("Render executor closed")

    async def run(
        self, fn: Callable[..., T], *args: Any, timeout: Optional[float] = None
    ) -> T:
        """
        Run ``fn(*args)`` on the pool and await its result.

        Args:
            fn: Blocking callable
            timeout: Seconds to wait for the result, ``None`` to wait forever

        Raises:
            RenderTimeoutError: If the result is not ready within ``timeout``
            RenderError: If the pool is not running
        """
        if self._executor is None or self._semaphore is None:
            raise RenderError("Task failed: render executor not started")

        loop = asyncio.get_running_loop()
        semaphore = self._semaphore

        await semaphore.acquire()
        self.in_flight += 1

        def _release(_: Future) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(self._release_slot, semaphore)

        try:
            future = self._executor.submit(contextvars.copy_context().run, fn, *args)
        except RuntimeError:
            self._release_slot(semaphore)
            raise
        future.add_done_callback(_release)

        try:
            return await asyncio.wait_for(asyncio.wrap_future(future), timeout=timeout)
        except asyncio.TimeoutError as e:
            self.logger.warning("Render timed out", timeout=timeout)
            raise RenderTimeoutError(f"Task failed: render timed out after {timeout}s") from e

    async def run_on_each_worker(self, fn: Callable[[], Any], timeout: float = 10.0) -> None:
        """
        Run ``fn()`` exactly once on every worker thread.

        One task per worker is submitted and each waits on a barrier until all
        are running, so no thread can pick up two of them. Intended for
        per-thread cleanup while the pool is idle; errors from ``fn`` are
        logged, not raised.
        """
        if self._executor is None:
            return

        barrier = threading.Barrier(self.max_workers)

        def _task() -> None:
            try:
                barrier.wait(timeout)
            except threading.BrokenBarrierError:
                self.logger.warning(
                    "Worker barrier broken", thread=threading.current_thread().name
                )
            try:
                fn()
            except Exception as e:
                self.logger.warning(
                    "Worker task failed", thread=threading.current_thread().name, error=str(e)
                )

        futures = [
            asyncio.wrap_future(self._executor.submit(_task)) for _ in range(self.max_workers)
        ]
        _, pending = await asyncio.wait(futures, timeout=timeout * 2)
        if pending:
            self.logger.warning("Worker tasks did not finish", pending=len(pending))

    def _release_slot(self, semaphore: asyncio.Semaphore) -> None:
        self.in_flight -= 1
        semaphore.release()
