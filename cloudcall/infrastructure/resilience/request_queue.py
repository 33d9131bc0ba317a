"""Bounded-concurrency request queue.

At most ``max_concurrent`` submitted thunks execute at any time; the rest
wait in an unbounded FIFO and are admitted as slots free up. Callers get
a future back immediately regardless of queue depth.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 2

T = TypeVar("T")


class RequestQueue:
    """Admits submitted coroutines a few at a time."""

    def __init__(self, max_concurrent: int = DEFAULT_MAX_CONCURRENT):
        """Initializes the queue.

        Args:
            max_concurrent: Maximum number of thunks executing at once.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self._active = 0
        self._waiters: Deque[asyncio.Future] = deque()
        self.submitted = 0
        self.peak_active = 0
        logger.debug(f"RequestQueue initialized: {max_concurrent} concurrent requests")

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    def submit(self, thunk: Callable[[], Awaitable[T]]) -> "asyncio.Future[T]":
        """Schedules ``thunk`` and returns a future for its outcome.

        Must be called from a running event loop.
        """
        self.submitted += 1
        return asyncio.ensure_future(self._run(thunk))

    async def _acquire(self) -> None:
        if self._active < self.max_concurrent and not self._waiters:
            self._active += 1
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug(f"Request queued ({len(self._waiters)} waiting, {self._active} active)")
        try:
            await waiter
        except asyncio.CancelledError:
            # A slot may already have been handed to us
            if waiter.done() and not waiter.cancelled():
                self._release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Slot passes straight to the next waiter; _active is unchanged
                waiter.set_result(None)
                return
        self._active -= 1

    async def _run(self, thunk: Callable[[], Awaitable[Any]]) -> Any:
        await self._acquire()
        self.peak_active = max(self.peak_active, self._active)
        try:
            return await thunk()
        finally:
            self._release()
