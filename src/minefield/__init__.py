"""
Minesweeper game engine module.

Provides the authoritative logic of a shared board: cells, mine
placement, flood-fill reveal, flagging, win/loss detection and the
timed restart cycle.
"""
from .cell import Cell, CellState, CellStateError, MINE
from .board import Board, BoardConfig, Coordinate
from .random_source import RandomSource, PythonRandom
from .reveal import CellDiff, RevealResult, open_cells
from .scheduler import Scheduler, TimerHandle, AsyncioScheduler, VirtualScheduler
from .events import Signal
from .state import Outcome, Started, Ended, GameState, GameStateMachine
from .engine import GameConfig, Counters, Snapshot, GameEngine

__all__ = [
    "Cell",
    "CellState",
    "CellStateError",
    "MINE",
    "Board",
    "BoardConfig",
    "Coordinate",
    "RandomSource",
    "PythonRandom",
    "CellDiff",
    "RevealResult",
    "open_cells",
    "Scheduler",
    "TimerHandle",
    "AsyncioScheduler",
    "VirtualScheduler",
    "Signal",
    "Outcome",
    "Started",
    "Ended",
    "GameState",
    "GameStateMachine",
    "GameConfig",
    "Counters",
    "Snapshot",
    "GameEngine",
]
