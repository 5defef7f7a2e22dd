"""
Cancellable scheduled tasks for the review loop.

The controller never relies on ambient timers: every countdown tick and every
deferred transition is a TimerHandle it owns and cancels explicitly.
"""

import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle:
    """A scheduled callback that can be cancelled before it fires."""

    def __init__(
        self,
        callback: TimerCallback,
        due: float,
        interval: Optional[float] = None,
    ):
        self.callback = callback
        self.due = due
        self.interval = interval
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def periodic(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        """Prevent any further firing of this handle. Idempotent."""
        self._cancelled = True

    def __repr__(self) -> str:
        kind = f"every {self.interval}s" if self.periodic else "once"
        state = "cancelled" if self._cancelled else "pending"
        return f"<TimerHandle due={self.due} {kind} {state}>"


class TimerScheduler(ABC):
    """
    Abstract source of scheduled callbacks.
    """

    @abstractmethod
    def call_later(self, delay: float, callback: TimerCallback) -> TimerHandle:
        """Run `callback` once, `delay` seconds from now."""
        pass

    @abstractmethod
    def call_every(
        self, interval: float, callback: TimerCallback
    ) -> TimerHandle:
        """Run `callback` every `interval` seconds until cancelled."""
        pass


class VirtualTimerScheduler(TimerScheduler):
    """
    Deterministic single-threaded scheduler driven by a virtual clock.

    Time only moves when `advance()` is called. Due callbacks fire in due-time
    order; callbacks due at the same instant fire in the order they were
    scheduled. Callbacks may schedule or cancel other timers while running.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (handle.due, next(self._sequence), handle))

    def call_later(self, delay: float, callback: TimerCallback) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"Invalid delay: {delay}. Must be >= 0.")
        handle = TimerHandle(callback, due=self._now + delay)
        self._push(handle)
        return handle

    def call_every(
        self, interval: float, callback: TimerCallback
    ) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"Invalid interval: {interval}. Must be > 0.")
        handle = TimerHandle(
            callback, due=self._now + interval, interval=interval
        )
        self._push(handle)
        return handle

    def pending(self) -> List[TimerHandle]:
        """Return the handles that are still scheduled, in firing order."""
        return [h for _, _, h in sorted(self._queue) if not h.cancelled]

    def advance(
        self, seconds: float, until: Optional[Callable[[], bool]] = None
    ) -> int:
        """
        Move the clock forward, firing every callback that becomes due.

        Parameters:
            seconds (float): How far to move the clock; must be >= 0.
            until (Callable[[], bool]): Checked after each callback. Once it
                returns True the clock stops at that callback's due time and
                later handles stay pending.

        Returns:
            int: Number of callbacks fired.
        """
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards by {seconds}s.")
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            if handle.periodic:
                handle.due = due + handle.interval
                self._push(handle)
            handle.callback()
            fired += 1
            if until is not None and until():
                return fired
        self._now = target
        return fired
