"""Trailing-edge debounce on top of asyncio tasks."""

import asyncio
import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Delay calls to ``func`` until ``wait`` seconds pass without a new call.

    Only the last call inside a quiet window fires. A call whose callback has
    already started is no longer pending: later calls and ``cancel()`` leave
    it running.
    """

    def __init__(self, func: Callable[..., Any], wait: float):
        self.func = func
        self.wait = wait
        self._timer: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    def __call__(self, *args, **kwargs) -> None:
        self.cancel()
        task = asyncio.create_task(self._run(args, kwargs))
        self._timer = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def drain(self) -> None:
        """Wait for the pending call and any callbacks still running."""
        while True:
            tasks = [task for task in self._tasks if not task.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, args: tuple, kwargs: dict) -> None:
        await asyncio.sleep(self.wait)
        if self._timer is asyncio.current_task():
            self._timer = None

        try:
            result = self.func(*args, **kwargs)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Debounced callback failed")
