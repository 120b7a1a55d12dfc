"""
Board module for the shared Minesweeper board.

Implements the grid of cells, mine placement and adjacency computation.
Opening and flagging rules live in the reveal and engine modules.
"""
from dataclasses import dataclass
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple

from .cell import Cell, CellState, MINE
from .random_source import RandomSource


# ============================================================================
# Constants
# ============================================================================

class Coordinate(NamedTuple):
    """Position of a cell: x is the column, y is the row."""

    x: int
    y: int


NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dx, dy)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
)


@dataclass(frozen=True)
class BoardConfig:
    """
    Configuration for a Minesweeper board.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        num_mines: Total mines to place.
    """

    width: int = 9
    height: int = 9
    num_mines: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.width < 1 or self.height < 1:
            raise ValueError("Board dimensions must be positive")
        if self.num_mines < 1:
            raise ValueError("Number of mines must be positive")
        max_mines = self.width * self.height - 1
        if self.num_mines > max_mines:
            raise ValueError(f"Too many mines (max {max_mines})")

    @property
    def total_cells(self) -> int:
        """Number of cells on the board."""
        return self.width * self.height


# ============================================================================
# Board Class
# ============================================================================

class Board:
    """
    Minesweeper game board.

    Holds a row-major grid of cells, indexed by ``(x, y)`` with
    ``0 <= x < width`` and ``0 <= y < height``.
    """

    def __init__(self, config: BoardConfig, grid: List[List[Cell]]) -> None:
        if len(grid) != config.height or any(
            len(row) != config.width for row in grid
        ):
            raise ValueError("Grid does not match board dimensions")
        self.config = config
        self._grid = grid

    # ========================================================================
    # Construction (Low-level)
    # ========================================================================

    @classmethod
    def generate(cls, config: BoardConfig, rng: RandomSource) -> "Board":
        """
        Build a board with randomly placed mines.

        Draws ``(x, y)`` pairs and rejects cells that already hold a mine
        until ``config.num_mines`` distinct cells are mined. The config
        guarantees at least one free cell, so placement terminates.

        Args:
            config: Validated board configuration.
            rng: Source of uniform integers.

        Returns:
            A fully generated board with all cells closed.
        """
        mines = set()
        while len(mines) < config.num_mines:
            x = rng.next_int(0, config.width)
            y = rng.next_int(0, config.height)
            mines.add(Coordinate(x, y))
        return cls.from_mines(config, mines)

    @classmethod
    def from_mines(
        cls, config: BoardConfig, mines: Iterable[Tuple[int, int]]
    ) -> "Board":
        """
        Build a board with mines at the given positions.

        Args:
            config: Board configuration; its mine count must match.
            mines: (x, y) positions of the mines.

        Returns:
            Board with adjacent counts computed for every non-mine cell.
        """
        positions = {Coordinate(*position) for position in mines}
        if len(positions) != config.num_mines:
            raise ValueError(
                f"Expected {config.num_mines} mines, got {len(positions)}"
            )

        grid = [
            [Cell() for _ in range(config.width)]
            for _ in range(config.height)
        ]
        for x, y in positions:
            if not (0 <= x < config.width and 0 <= y < config.height):
                raise ValueError(f"Mine position {(x, y)} is off the board")
            grid[y][x] = Cell(value=MINE)

        board = cls(config, grid)
        board._calculate_adjacent_mines()
        return board

    def _calculate_adjacent_mines(self) -> None:
        """Calculate adjacent mine counts for all non-mine cells."""
        for position, cell in self.iter_cells():
            if not cell.is_mine:
                cell.value = self._count_adjacent_mines(position)

    def _count_adjacent_mines(self, position: Coordinate) -> int:
        """Count mines adjacent to a specific cell."""
        return sum(
            1 for neighbor in self.neighbors(position)
            if self.cell_at(neighbor).is_mine
        )

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def neighbors(self, position: Tuple[int, int]) -> List[Coordinate]:
        """
        Get valid neighboring cell positions.

        Edge and corner cells simply have fewer neighbors.

        Args:
            position: (x, y) of the center cell.

        Returns:
            List of in-bounds neighbor coordinates.
        """
        x, y = position
        neighbors = []
        for delta_x, delta_y in NEIGHBOR_OFFSETS:
            new_x = x + delta_x
            new_y = y + delta_y
            if self.is_valid_position(new_x, new_y):
                neighbors.append(Coordinate(new_x, new_y))
        return neighbors

    def is_valid_position(self, x: int, y: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= x < self.config.width and 0 <= y < self.config.height

    # ========================================================================
    # Cell Access
    # ========================================================================

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def mines_count(self) -> int:
        return self.config.num_mines

    def cell_at(self, position: Tuple[int, int]) -> Cell:
        """Get the cell at an in-bounds position."""
        x, y = position
        return self._grid[y][x]

    def get_cell(self, x: int, y: int) -> Optional[Cell]:
        """Get cell at position, or None if invalid."""
        if not self.is_valid_position(x, y):
            return None
        return self._grid[y][x]

    def iter_cells(self) -> Iterator[Tuple[Coordinate, Cell]]:
        """Yield every (position, cell) pair in row-major order."""
        for y, row in enumerate(self._grid):
            for x, cell in enumerate(row):
                yield Coordinate(x, y), cell

    def mine_positions(self) -> List[Coordinate]:
        """Positions of every mine, row-major."""
        return [position for position, cell in self.iter_cells() if cell.is_mine]

    def count_state(self, state: CellState) -> int:
        """Number of cells currently in the given state."""
        return sum(1 for _, cell in self.iter_cells() if cell.state == state)

