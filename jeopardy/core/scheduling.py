"""
Cancellable delayed callbacks

The session owns at most one pending handle at a time. AsyncioScheduler is
used by the API server (all operations run on the event loop); ManualScheduler
drives a virtual clock for tests and replays.
"""
import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class _AsyncioHandle:
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        # asyncio handles tolerate repeated cancel()
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler:
    """Schedules callbacks on the running event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop.call_later(delay_ms / 1000.0, callback))


class ManualHandle:
    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """
    Virtual-clock scheduler

    Example:
        >>> fired = []
        >>> s = ManualScheduler()
        >>> _ = s.call_later(3000, lambda: fired.append(s.now_ms))
        >>> s.advance(2999)
        0
        >>> fired
        []
        >>> s.advance(1)
        1
        >>> fired
        [3000]
    """

    def __init__(self):
        self.now_ms = 0
        self._queue: List[Tuple[int, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now_ms + max(0, delay_ms), callback)
        heapq.heappush(self._queue, (handle.due_ms, next(self._seq), handle))
        return handle

    def advance(self, ms: int) -> int:
        """Move the clock forward, firing due callbacks in order. Returns fired count."""
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self.now_ms = due
            if handle.cancelled:
                continue
            handle.fired = True
            fired += 1
            handle.callback()
        self.now_ms = target
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)
