"""
Game engine for the shared Minesweeper board.

The engine is the single authority over one board. Transports forward
open/flag requests into it and relay the events it emits to every
connected observer. All calls, including timer ticks, are expected to run
on one thread, one at a time.
"""
import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .board import Board, BoardConfig, Coordinate
from .cell import CellState
from .events import Signal
from .random_source import PythonRandom, RandomSource
from .reveal import CellDiff, open_cells
from .scheduler import AsyncioScheduler, Scheduler
from .state import Ended, GameState, GameStateMachine, Outcome

logger = logging.getLogger(__name__)

StartedCallback = Callable[["Snapshot"], None]
UpdateCallback = Callable[[List[CellDiff], Optional[Ended]], None]
CountdownCallback = Callable[[int], None]


# ============================================================================
# Configuration
# ============================================================================

@dataclass(frozen=True)
class GameConfig:
    """
    Configuration for a game engine.

    Attributes:
        board: Dimensions and mine count of every round's board.
        restart_timeout_seconds: Countdown between a round ending and the
            next one starting.
    """

    board: BoardConfig = field(default_factory=BoardConfig)
    restart_timeout_seconds: int = 3

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        timeout = self.restart_timeout_seconds
        if isinstance(timeout, bool) or not isinstance(timeout, int):
            raise ValueError("Restart timeout must be a whole number of seconds")
        if timeout < 1:
            raise ValueError("Restart timeout must be at least one second")


# ============================================================================
# Round State
# ============================================================================

@dataclass
class Counters:
    """
    Per-round counters kept alongside the board.

    Attributes:
        total_cells: Number of cells on the board.
        mines_count: Number of mines on the board.
        opened_count: Cells currently opened.
        flags_count: Cells currently flagged.
        mines_remaining: Mines not covered by a flag.
    """

    total_cells: int
    mines_count: int
    opened_count: int = 0
    flags_count: int = 0
    mines_remaining: int = field(init=False)

    def __post_init__(self) -> None:
        self.mines_remaining = self.mines_count

    @property
    def closed_count(self) -> int:
        """Cells neither opened nor flagged."""
        return self.total_cells - self.opened_count - self.flags_count


@dataclass
class Round:
    """One board and its counters; replaced wholesale on restart."""

    board: Board
    counters: Counters


@dataclass(frozen=True)
class Snapshot:
    """Full visible state for an observer that has just connected."""

    width: int
    height: int
    mines_count: int
    flags_count: int
    game_state: GameState
    visible_cells: List[CellDiff]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "width": self.width,
            "height": self.height,
            "mines_count": self.mines_count,
            "flags_count": self.flags_count,
            "game_state": self.game_state.to_dict(),
            "visible_cells": [cell.to_dict() for cell in self.visible_cells],
        }


# ============================================================================
# Game Engine
# ============================================================================

class GameEngine:
    """
    Public façade over the board, reveal logic and round state machine.

    Invalid coordinates and actions that the current state forbids are
    ignored and produce an empty diff; late requests arriving after a
    round has ended are expected.
    """

    def __init__(
        self,
        config: GameConfig,
        rng: Optional[RandomSource] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        """
        Initialize the engine and generate the first round.

        Args:
            config: Validated game configuration.
            rng: Random source for mine placement.
            scheduler: Timer source for the restart countdown; defaults to
                the running asyncio loop.
        """
        self.config = config
        self._rng = rng or PythonRandom()

        self._started: Signal[StartedCallback] = Signal("started")
        self._updated: Signal[UpdateCallback] = Signal("update")
        self._countdown: Signal[CountdownCallback] = Signal("restart_countdown")

        self._machine = GameStateMachine(
            scheduler or AsyncioScheduler(),
            config.restart_timeout_seconds,
            on_countdown=self._countdown.emit,
            on_restart=self._start_new_round,
            on_started=self._notify_started,
        )
        self._round = self._build_round()
        logger.info(
            f"Engine ready: {self.width}x{self.height} board "
            f"with {self.mines_count} mines"
        )

    # ========================================================================
    # Round Construction (Low-level)
    # ========================================================================

    def _build_round(self) -> Round:
        board_config = self.config.board
        board = Board.generate(board_config, self._rng)
        counters = Counters(
            total_cells=board_config.total_cells,
            mines_count=board_config.num_mines,
        )
        return Round(board=board, counters=counters)

    def _start_new_round(self) -> None:
        self._round = self._build_round()

    def _notify_started(self) -> None:
        self._started.emit(self.load_snapshot())

    # ========================================================================
    # Validation
    # ========================================================================

    @staticmethod
    def _as_index(value: Any) -> Optional[int]:
        """Convert an integral number to int; anything else gives None."""
        if isinstance(value, bool):
            return None
        if isinstance(value, numbers.Integral):
            return int(value)
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            return int(value)
        return None

    def _resolve(self, x: Any, y: Any) -> Optional[Coordinate]:
        index_x = self._as_index(x)
        index_y = self._as_index(y)
        if index_x is None or index_y is None:
            return None
        if not self._round.board.is_valid_position(index_x, index_y):
            return None
        return Coordinate(index_x, index_y)

    def is_valid_coordinate(self, x: Any, y: Any) -> bool:
        """
        Check that ``(x, y)`` names a cell on the board.

        Rejects non-numeric, non-finite, fractional and out-of-bounds
        values. Transports call this before open/flag and drop requests
        that fail it.
        """
        return self._resolve(x, y) is not None

    def _accepts(self, action: str, x: Any, y: Any) -> Optional[Coordinate]:
        position = self._resolve(x, y)
        if position is None:
            logger.debug(f"Ignoring {action} at invalid coordinate ({x!r}, {y!r})")
            return None
        if not self._machine.is_started:
            logger.debug(f"Ignoring {action} at {tuple(position)}: round has ended")
            return None
        return position

    # ========================================================================
    # Game Actions
    # ========================================================================

    def open(self, x: Any, y: Any) -> List[CellDiff]:
        """
        Open a cell, cascading through empty neighbors.

        Args:
            x: Column of the cell.
            y: Row of the cell.

        Returns:
            Every cell changed by this call; empty if the request was
            rejected or the cell was not closed.
        """
        position = self._accepts("open", x, y)
        if position is None:
            return []

        board = self._round.board
        counters = self._round.counters
        result = open_cells(board, position)
        if not result.diff:
            return []
        counters.opened_count += result.opened_count
        counters.flags_count -= result.flags_cleared
        counters.mines_remaining += result.flags_cleared

        ended: Optional[Ended] = None
        if result.hit_mine:
            ended = self._end_round(Outcome.LOST)
        elif self._is_reveal_complete():
            ended = self._end_round(Outcome.WON)

        self._updated.emit(result.diff, ended)
        return result.diff

    def flag(self, x: Any, y: Any) -> List[CellDiff]:
        """
        Toggle the flag on a closed or flagged cell.

        Args:
            x: Column of the cell.
            y: Row of the cell.

        Returns:
            Single-cell diff without the value; empty if the request was
            rejected or the cell is opened.
        """
        position = self._accepts("flag", x, y)
        if position is None:
            return []

        cell = self._round.board.cell_at(position)
        counters = self._round.counters
        new_state = cell.toggle_flag()
        if new_state is None:
            return []

        step = 1 if new_state == CellState.FLAGGED else -1
        counters.flags_count += step
        if cell.is_mine:
            counters.mines_remaining -= step

        diff = [CellDiff(position, new_state)]
        ended: Optional[Ended] = None
        if self._is_flag_complete():
            ended = self._end_round(Outcome.WON)

        self._updated.emit(diff, ended)
        return diff

    # ========================================================================
    # Win Conditions
    # ========================================================================

    def _is_reveal_complete(self) -> bool:
        """Every non-mine cell is opened or accounted for by a flag."""
        counters = self._round.counters
        return (
            counters.opened_count + counters.flags_count
            == counters.total_cells - counters.mines_remaining
        )

    def _is_flag_complete(self) -> bool:
        """Every mine is flagged and every flag is on a mine."""
        counters = self._round.counters
        return (
            counters.mines_remaining == 0
            and counters.flags_count == counters.mines_count
        )

    def _end_round(self, outcome: Outcome) -> Ended:
        return self._machine.end(outcome)

    # ========================================================================
    # Observers
    # ========================================================================

    def on_started(self, callback: StartedCallback) -> StartedCallback:
        """Subscribe to fresh rounds; called with the new round's snapshot."""
        return self._started.connect(callback)

    def on_update(self, callback: UpdateCallback) -> UpdateCallback:
        """Subscribe to cell diffs; the second argument is set when the round ends."""
        return self._updated.connect(callback)

    def on_restart_countdown(self, callback: CountdownCallback) -> CountdownCallback:
        """Subscribe to countdown ticks; called with the seconds left."""
        return self._countdown.connect(callback)

    def load_snapshot(self) -> Snapshot:
        """Get the full visible state of the current round."""
        board = self._round.board
        visible = [
            CellDiff(
                position,
                cell.state,
                cell.value if cell.is_opened else None,
            )
            for position, cell in board.iter_cells()
            if not cell.is_closed
        ]
        return Snapshot(
            width=board.width,
            height=board.height,
            mines_count=board.mines_count,
            flags_count=self._round.counters.flags_count,
            game_state=self._machine.state,
            visible_cells=visible,
        )

    def close(self) -> None:
        """Cancel a pending countdown tick."""
        self._machine.cancel()

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def state(self) -> GameState:
        """Current round state."""
        return self._machine.state

    @property
    def board(self) -> Board:
        """Board of the current round."""
        return self._round.board

    @property
    def counters(self) -> Counters:
        """Counters of the current round."""
        return self._round.counters

    @property
    def width(self) -> int:
        return self.config.board.width

    @property
    def height(self) -> int:
        return self.config.board.height

    @property
    def mines_count(self) -> int:
        return self.config.board.num_mines
