"""Async debouncing for keystroke-driven calls."""

import asyncio
from typing import Any, Awaitable, Callable, Optional


class Debouncer:
    """Delay a coroutine function until calls stop for *wait* seconds.

    Each call cancels the previous one if it is still inside its quiet
    period.  Calls that already started running are left alone.
    """

    def __init__(self, func: Callable[..., Awaitable[Any]], wait: float):
        self.func = func
        self.wait = wait
        self._task: Optional[asyncio.Task] = None

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        """Schedule a call; returns the task (cancelled if superseded)."""
        self.cancel()
        self._task = asyncio.create_task(self._run(args, kwargs))
        return self._task

    async def _run(self, args: tuple, kwargs: dict) -> Any:
        await asyncio.sleep(self.wait)
        # Quiet period is over, later calls must not cancel this one
        if self._task is asyncio.current_task():
            self._task = None
        return await self.func(*args, **kwargs)

    def cancel(self) -> None:
        """Drop the waiting call, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
