"""
Cell module for the shared Minesweeper board.

Represents individual cells on the board with their disclosure state
(closed/opened/flagged) and content (mine marker or adjacent count).
"""
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


# ============================================================================
# Constants
# ============================================================================

MINE = "X"

CellValue = Union[int, str]


class CellState(Enum):
    """Possible disclosure states of a cell."""

    CLOSED = "closed"
    OPENED = "opened"
    FLAGGED = "flagged"


class CellStateError(RuntimeError):
    """Raised when a cell is asked for a transition its state forbids."""


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    Represents a single cell in the Minesweeper grid.

    The value is fixed once the board is generated; only the state moves.
    Opened is terminal.

    Attributes:
        value: Adjacent mine count (0-8) or MINE.
        state: Current disclosure state.
    """

    value: CellValue = 0
    state: CellState = CellState.CLOSED

    def open(self) -> Dict[str, Any]:
        """
        Open this cell.

        Callers must check the state first; only a closed cell can be
        opened.

        Returns:
            Serialized cell including its value.

        Raises:
            CellStateError: If the cell is not closed.
        """
        if self.state != CellState.CLOSED:
            raise CellStateError(f"Cannot open a {self.state.value} cell")
        self.state = CellState.OPENED
        return self.to_dict()

    def disclose(self) -> Dict[str, Any]:
        """
        Open this cell at the end of a lost round, flag or no flag.

        Raises:
            CellStateError: If the cell is already opened.
        """
        if self.state == CellState.OPENED:
            raise CellStateError("Cannot disclose an opened cell")
        self.state = CellState.OPENED
        return self.to_dict()

    def set_flag(self) -> bool:
        """Flag a closed cell. Returns False for any other state."""
        if self.state != CellState.CLOSED:
            return False
        self.state = CellState.FLAGGED
        return True

    def remove_flag(self) -> bool:
        """Unflag a flagged cell. Returns False for any other state."""
        if self.state != CellState.FLAGGED:
            return False
        self.state = CellState.CLOSED
        return True

    def toggle_flag(self) -> Optional[CellState]:
        """
        Toggle flag on this cell.

        Returns:
            The new state, or None if the cell is opened.
        """
        if self.state == CellState.OPENED:
            return None
        if self.state == CellState.CLOSED:
            self.set_flag()
        else:
            self.remove_flag()
        return self.state

    @property
    def is_mine(self) -> bool:
        """Check if cell holds a mine."""
        return self.value == MINE

    @property
    def is_closed(self) -> bool:
        """Check if cell is closed."""
        return self.state == CellState.CLOSED

    @property
    def is_opened(self) -> bool:
        """Check if cell is opened."""
        return self.state == CellState.OPENED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.state == CellState.FLAGGED

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the cell for observers.

        A closed or flagged cell never exposes its value.
        """
        if self.state == CellState.OPENED:
            return {"state": self.state.value, "value": self.value}
        return {"state": self.state.value}

