"""Timer-coalescing helper for high-frequency host signals."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class Debouncer:
    """Collapse bursts of calls into a single call of ``func``.

    Each call resets a pending timer; when the timer expires, ``func`` runs
    with the arguments of the most recent call. Calls made while ``func`` is
    already running schedule a new run rather than interrupting it.

    Example:
        debounced = Debouncer(explorer.on_active_document_changed, wait=0.5)
        tracker.on_did_change_active_document.subscribe(debounced)
    """

    def __init__(self, func: Callable[..., Any], wait: float):
        """
        Args:
            func: Callable to invoke; coroutine functions are awaited in a task
            wait: Quiet period in seconds before ``func`` runs
        """
        self._func = func
        self.wait = wait
        self._handle: Optional[asyncio.TimerHandle] = None
        self._args = ()
        self._kwargs = {}
        self._tasks: Set[asyncio.Future] = set()
        self.call_count = 0
        self.run_count = 0

    def __call__(self, *args, **kwargs) -> None:
        loop = asyncio.get_running_loop()
        self.call_count += 1
        if self._handle is not None:
            self._handle.cancel()
        self._args = args
        self._kwargs = kwargs
        self._handle = loop.call_later(self.wait, self._invoke)

    @property
    def pending(self) -> bool:
        """True while a call is waiting for its timer."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def cancel(self) -> None:
        """Drop the pending call, if any. Running calls are left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run the pending call now and wait for every running call."""
        if self._handle is not None:
            self._handle.cancel()
            self._invoke()
        while self._tasks:
            tasks = list(self._tasks)
            await asyncio.gather(*tasks, return_exceptions=True)
            self._tasks.difference_update(tasks)

    def _invoke(self) -> None:
        self._handle = None
        args, kwargs = self._args, self._kwargs
        self._args, self._kwargs = (), {}
        self.run_count += 1
        try:
            result = self._func(*args, **kwargs)
        except Exception:
            logger.warning(f"Debounced call to {self._func!r} failed", exc_info=True)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Debounced call to {self._func!r} failed", exc_info=task.exception())
