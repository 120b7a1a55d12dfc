"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path
from typing import List, Sequence, Tuple

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import (
    Board,
    BoardConfig,
    Cell,
    GameConfig,
    GameEngine,
    MINE,
    PythonRandom,
    VirtualScheduler,
)


# ============================================================================
# Helpers
# ============================================================================

class ScriptedRandom:
    """
    RandomSource that places mines at fixed positions.

    Board generation draws x then y for each mine, so feeding the mine
    coordinates in order reproduces the same layout every round.
    """

    def __init__(self, mines: Sequence[Tuple[int, int]]) -> None:
        self._draws: List[int] = [value for position in mines for value in position]
        self._index = 0
        self.calls = 0

    def next_int(self, low: int, high: int) -> int:
        value = self._draws[self._index % len(self._draws)]
        self._index += 1
        self.calls += 1
        assert low <= value < high
        return value


class Recorder:
    """Collects engine events in the order they were emitted."""

    def __init__(self, engine: GameEngine) -> None:
        self.events: List[tuple] = []
        engine.on_started(lambda snapshot: self.events.append(("started", snapshot)))
        engine.on_update(lambda diff, ended: self.events.append(("update", diff, ended)))
        engine.on_restart_countdown(
            lambda seconds: self.events.append(("countdown", seconds))
        )

    def of(self, kind: str) -> List[tuple]:
        return [event for event in self.events if event[0] == kind]


def make_engine(
    width: int,
    height: int,
    mines: Sequence[Tuple[int, int]],
    scheduler: VirtualScheduler,
    restart_timeout_seconds: int = 3,
) -> GameEngine:
    """Build an engine whose every round uses the given mine layout."""
    config = GameConfig(
        board=BoardConfig(width, height, len(mines)),
        restart_timeout_seconds=restart_timeout_seconds,
    )
    return GameEngine(config, rng=ScriptedRandom(mines), scheduler=scheduler)


# ============================================================================
# Scheduler Fixtures
# ============================================================================

@pytest.fixture
def scheduler() -> VirtualScheduler:
    """Create a virtual clock starting at zero."""
    return VirtualScheduler()


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def corner_mine_board() -> Board:
    """3x3 board with a single mine in the top-left corner."""
    return Board.from_mines(BoardConfig(3, 3, 1), [(0, 0)])


@pytest.fixture
def wall_board() -> Board:
    """5x5 board with a vertical wall of mines in column 2."""
    mines = [(2, y) for y in range(5)]
    return Board.from_mines(BoardConfig(5, 5, 5), mines)


@pytest.fixture
def default_board() -> Board:
    """Randomly generated beginner board."""
    return Board.generate(BoardConfig(9, 9, 10), PythonRandom(seed=7))


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def corner_engine(scheduler: VirtualScheduler) -> GameEngine:
    """Engine on a 3x3 board with one mine at (0, 0)."""
    return make_engine(3, 3, [(0, 0)], scheduler)


@pytest.fixture
def wall_engine(scheduler: VirtualScheduler) -> GameEngine:
    """Engine on a 5x5 board with mines filling column 2."""
    return make_engine(5, 5, [(2, y) for y in range(5)], scheduler)


@pytest.fixture
def scattered_engine(scheduler: VirtualScheduler) -> GameEngine:
    """Engine on a 4x4 board with mines in three corners."""
    return make_engine(4, 4, [(0, 0), (3, 0), (3, 3)], scheduler)


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def closed_cell() -> Cell:
    """Create a closed empty cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(value=MINE)
