"""
Round state machine for the shared Minesweeper board.

States:
    Started -> Ended(outcome, seconds_left=timeout)
            -> one tick per second, seconds_left -= 1
            -> seconds_left == 0 -> fresh board -> Started
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


# ============================================================================
# States
# ============================================================================

class Outcome(Enum):
    """How a round ended."""

    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class Started:
    """Round active, actions accepted."""

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "started"}


@dataclass(frozen=True)
class Ended:
    """Round over; only the countdown moves."""

    outcome: Outcome
    seconds_left: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "ended",
            "outcome": self.outcome.value,
            "seconds_left": self.seconds_left,
        }


GameState = Union[Started, Ended]


# ============================================================================
# State Machine
# ============================================================================

class GameStateMachine:
    """
    Tracks whether the round is active and drives the restart countdown.

    Once a round ends nothing but the scheduled ticks can change the
    state; players can neither shorten nor cancel the countdown.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        restart_timeout_seconds: int,
        on_countdown: Callable[[int], None],
        on_restart: Callable[[], None],
        on_started: Callable[[], None],
    ) -> None:
        """
        Initialize the state machine in the Started state.

        Args:
            scheduler: Source of cancellable one-shot timers.
            restart_timeout_seconds: Countdown length after a round ends.
            on_countdown: Called with the new seconds_left on every tick.
            on_restart: Called at zero to build a fresh round.
            on_started: Called once the fresh round is active.
        """
        if restart_timeout_seconds < 1:
            raise ValueError("Restart timeout must be at least one second")
        self._scheduler = scheduler
        self.restart_timeout_seconds = restart_timeout_seconds
        self._on_countdown = on_countdown
        self._on_restart = on_restart
        self._on_started = on_started
        self._state: GameState = Started()
        self._tick_handle: Optional[TimerHandle] = None

    @property
    def state(self) -> GameState:
        """Current round state."""
        return self._state

    @property
    def is_started(self) -> bool:
        """Check if actions are currently accepted."""
        return isinstance(self._state, Started)

    def end(self, outcome: Outcome) -> Ended:
        """
        End the active round and start the countdown.

        Args:
            outcome: Won or lost.

        Returns:
            The new Ended state.

        Raises:
            RuntimeError: If the round has already ended.
        """
        if not self.is_started:
            raise RuntimeError("Round has already ended")
        self._state = Ended(outcome, self.restart_timeout_seconds)
        logger.info(
            f"Round {outcome.value}, restarting in {self.restart_timeout_seconds}s"
        )
        self._schedule_tick()
        return self._state

    def cancel(self) -> None:
        """Drop a pending tick. The state stays where it is."""
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _schedule_tick(self) -> None:
        self._tick_handle = self._scheduler.call_later(TICK_SECONDS, self._tick)

    def _tick(self) -> None:
        """Advance the countdown by one second."""
        state = self._state
        if not isinstance(state, Ended):
            return

        seconds_left = state.seconds_left - 1
        self._state = Ended(state.outcome, seconds_left)
        if seconds_left > 0:
            self._schedule_tick()
            self._on_countdown(seconds_left)
            return

        self._tick_handle = None
        # The fresh round must start even if a countdown subscriber raises
        try:
            self._on_countdown(0)
        finally:
            self._on_restart()
            self._state = Started()
            logger.info("New round started")
        self._on_started()
