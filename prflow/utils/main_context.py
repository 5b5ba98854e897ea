"""Main coordination context and per-workflow task scopes.

All view-model state is written on one asyncio event loop ("main"). Blocking
collaborator calls run on a thread pool; awaiting them resumes on the loop,
so results are applied in loop order and never interleave.

``WorkflowScope`` owns the tasks spawned for one workflow instance, much like
a poll scheduler owns its timer handles, and cancels them all on dispose.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Coroutine, Optional, Set, TypeVar

T = TypeVar("T")

log = logging.getLogger(__name__)


class MainContext:
    """Marshal work between the coordination loop and background workers."""

    def __init__(
        self,
        *,
        executor: Optional[ThreadPoolExecutor] = None,
        max_workers: int = 4,
    ) -> None:
        """Create a context with its own worker pool unless one is supplied.

        Args:
            executor: Shared executor; the context will not shut it down.
            max_workers: Pool size when the context creates its own executor.
        """
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="prflow-io"
        )
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[int] = None

    def bind(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.AbstractEventLoop:
        """Attach the context to ``loop`` (default: the running loop)."""
        bound = loop or asyncio.get_running_loop()
        self._loop = bound
        self._loop_thread = threading.get_ident()
        return bound

    def on_main_thread(self) -> bool:
        return self._loop_thread is not None and threading.get_ident() == self._loop_thread

    async def run_in_background(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking callable on the worker pool and resume on the loop."""
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self.bind(loop)
        call = functools.partial(fn, *args, **kwargs)
        return await loop.run_in_executor(self._executor, call)

    def call_on_main(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``fn`` on the loop from a worker thread and wait for its result.

        An awaitable result is awaited on the loop before returning, so a
        handler may itself suspend (for example waiting on user input) while
        only the calling worker blocks.

        Raises:
            RuntimeError: If no loop is bound or the caller is the loop thread.
        """
        loop = self._loop
        if loop is None or loop.is_closed():
            raise RuntimeError("MainContext is not bound to a running loop.")
        if self.on_main_thread():
            raise RuntimeError("call_on_main would block the coordination loop.")

        async def _invoke() -> Any:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        return asyncio.run_coroutine_threadsafe(_invoke(), loop).result()

    def dispatcher(self, fn: Callable[..., T]) -> Callable[..., T]:
        """Wrap ``fn`` so calling it from a worker runs it on the loop."""

        @functools.wraps(fn)
        def _dispatched(*args: Any, **kwargs: Any) -> T:
            return self.call_on_main(fn, *args, **kwargs)

        return _dispatched

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)


class WorkflowScope:
    """Track tasks for one workflow instance and discard them on dispose."""

    def __init__(self, name: str = "workflow") -> None:
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        """Schedule ``coro`` as a task owned by this scope.

        Raises:
            RuntimeError: If the scope has already been disposed.
        """
        if not self._alive:
            coro.close()
            raise RuntimeError(f"{self.name} scope is disposed.")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, coro: Coroutine[Any, Any, T]) -> Optional[T]:
        """Spawn ``coro`` and await it; ``None`` if dispose cancelled it."""
        task = self.spawn(coro)
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task.cancelled():
            return None
        return task.result()

    def dispose(self) -> None:
        if not self._alive:
            return
        self._alive = False
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        self._tasks.clear()
        if pending:
            log.debug("%s scope disposed with %d pending task(s)", self.name, len(pending))

    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())


__all__ = ["MainContext", "WorkflowScope"]
