"""
Reveal logic for the shared Minesweeper board.

Opening a cell either discloses every mine (loss) or opens the cell and
cascades through zero-valued neighbors. Every cell that changes is
reported as a CellDiff so observers receive only what moved.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .board import Board, Coordinate
from .cell import CellState, CellValue


# ============================================================================
# Diff Types
# ============================================================================

@dataclass(frozen=True)
class CellDiff:
    """
    A single cell change produced by one action.

    Attributes:
        position: Coordinate of the changed cell.
        state: State after the change.
        value: Cell value, set only for opened cells.
    """

    position: Coordinate
    state: CellState
    value: Optional[CellValue] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for observers; value is present only once opened."""
        data: Dict[str, Any] = {
            "x": self.position.x,
            "y": self.position.y,
            "state": self.state.value,
        }
        if self.state == CellState.OPENED:
            data["value"] = self.value
        return data


@dataclass
class RevealResult:
    """Outcome of a single open call."""

    diff: List[CellDiff] = field(default_factory=list)
    hit_mine: bool = False
    # Flagged mines opened by a loss; their flags are gone
    flags_cleared: int = 0

    @property
    def opened_count(self) -> int:
        """Number of cells opened by this call."""
        return len(self.diff)


# ============================================================================
# Flood Fill
# ============================================================================

def open_cells(board: Board, start: Coordinate) -> RevealResult:
    """
    Open a cell and everything it uncovers.

    A non-closed start cell is a no-op. A mine opens the start cell and
    every other mine, flagged ones included, and nothing else. Otherwise the start cell
    is opened and zero-valued cells spread to their closed neighbors;
    the spread stops at numbered cells and at flagged or opened cells.

    Args:
        board: Board to mutate.
        start: Cell to open; must be in bounds.

    Returns:
        RevealResult with the cells opened, in opening order.
    """
    result = RevealResult()
    if not board.cell_at(start).is_closed:
        return result

    if board.cell_at(start).is_mine:
        _disclose_mines(board, start, result)
        return result

    # Explicit work-list; large open areas must not recurse
    stack = [start]
    queued = {start}
    while stack:
        position = stack.pop()
        cell = board.cell_at(position)
        if not cell.is_closed:
            continue

        cell.open()
        result.diff.append(CellDiff(position, cell.state, cell.value))

        if cell.value != 0:
            continue
        for neighbor in board.neighbors(position):
            if neighbor not in queued and board.cell_at(neighbor).is_closed:
                queued.add(neighbor)
                stack.append(neighbor)

    return result


def _disclose_mines(board: Board, start: Coordinate, result: RevealResult) -> None:
    """Open the triggering mine first, then every other unopened mine."""
    result.hit_mine = True
    start_cell = board.cell_at(start)
    start_cell.open()
    result.diff.append(CellDiff(start, start_cell.state, start_cell.value))

    for position in board.mine_positions():
        cell = board.cell_at(position)
        if cell.is_opened:
            continue
        if cell.is_flagged:
            result.flags_cleared += 1
        cell.disclose()
        result.diff.append(CellDiff(position, cell.state, cell.value))
