"""
Timer scheduling for the restart countdown.

The engine never sleeps or spawns threads. It asks an injected scheduler
to call it back later and keeps the returned handle so a pending tick can
be cancelled. ``AsyncioScheduler`` drives a live server;
``VirtualScheduler`` drives tests and simulations on a virtual clock.
"""
import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


# ============================================================================
# Interfaces
# ============================================================================

class TimerHandle(Protocol):
    """A pending callback that can be cancelled."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Schedules callbacks on the engine's single logical thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


# ============================================================================
# Asyncio Scheduler
# ============================================================================

class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Initialize the scheduler.

        Args:
            loop: Loop to schedule on; defaults to the running loop.
        """
        self._loop = loop or asyncio.get_running_loop()

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback)


# ============================================================================
# Virtual Scheduler
# ============================================================================

class VirtualTimer:
    """Handle returned by VirtualScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """
    Deterministic scheduler with a manually advanced clock.

    Callbacks run in due-time order, ties in scheduling order, when
    ``advance`` moves the clock past them. Callbacks may schedule more
    callbacks; those also run if they fall within the advanced window.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, VirtualTimer]] = []
        self._sequence = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> VirtualTimer:
        if delay < 0:
            raise ValueError("Delay cannot be negative")
        timer = VirtualTimer(self.now + delay, callback)
        heapq.heappush(self._queue, (timer.when, next(self._sequence), timer))
        return timer

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run every callback that became due.

        Args:
            seconds: Amount of virtual time to advance.

        Returns:
            Number of callbacks run.
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = when
            timer.callback()
            ran += 1
        self.now = deadline
        return ran

    @property
    def pending(self) -> int:
        """Number of callbacks still scheduled and not cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)
