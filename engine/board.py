"""
Board model for TicTacToe.
Holds the 9 cells and answers rule queries (moves left, lines, end of round).
"""

from contextlib import contextmanager
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .errors import InvalidMoveError


BOARD_SIZE = 9

# Bit i stands for cell i (row-major, 0 = top-left)
BIT_WEIGHTS = np.array([1 << i for i in range(BOARD_SIZE)], dtype=np.int64)


class Cell(IntEnum):
    """The three states a cell can be in."""
    EMPTY = 0
    MARK_A = 1      # human
    MARK_B = 2      # computer

    def opposite(self) -> "Cell":
        """Get the other player's mark."""
        if self == Cell.EMPTY:
            raise ValueError("EMPTY has no opposite mark")
        return Cell.MARK_B if self == Cell.MARK_A else Cell.MARK_A


# All possible winning lines as cell indices
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    # Rows
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    # Columns
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    # Diagonals
    (0, 4, 8),
    (2, 4, 6),
)

# The same lines as 9-bit masks
WIN_PATTERNS: Tuple[int, ...] = tuple(
    sum(1 << i for i in line) for line in WINNING_LINES
)

_SYMBOLS = {Cell.EMPTY: " ", Cell.MARK_A: "X", Cell.MARK_B: "O"}


class Board:
    """
    The 3x3 board, stored as a flat array of 9 cells.

    Index layout:
        0 | 1 | 2
        3 | 4 | 5
        6 | 7 | 8
    """

    def __init__(self, cells: Optional[List[int]] = None):
        """
        Create a board.

        Args:
            cells: Optional 9 cell values to start from (default: all empty).
        """
        if cells is None:
            self.cells = np.full(BOARD_SIZE, Cell.EMPTY, dtype=np.int8)
        else:
            if len(cells) != BOARD_SIZE:
                raise ValueError(f"A board has {BOARD_SIZE} cells, got {len(cells)}")
            self.cells = np.array([Cell(c) for c in cells], dtype=np.int8)

    def __len__(self) -> int:
        return BOARD_SIZE

    def __getitem__(self, index: int) -> Cell:
        return Cell(int(self.cells[index]))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.cells, other.cells))

    def __repr__(self) -> str:
        return f"Board({self.cells.tolist()})"

    def is_empty(self, index: int) -> bool:
        """Check if a cell holds no mark."""
        return bool(self.cells[index] == Cell.EMPTY)

    def available_moves(self) -> List[int]:
        """
        Get all empty cells, in ascending index order.

        Returns:
            List of cell indices.
        """
        return np.flatnonzero(self.cells == Cell.EMPTY).tolist()

    def mask(self, mark: Cell) -> int:
        """Get the 9-bit mask of the cells occupied by `mark`."""
        return int(np.dot(self.cells == mark, BIT_WEIGHTS))

    def has_line(self, mark: Cell) -> bool:
        """Check if `mark` fully owns at least one winning line."""
        occupied = self.mask(mark)
        return any(occupied & pattern == pattern for pattern in WIN_PATTERNS)

    def is_full(self) -> bool:
        """Check if no empty cell remains."""
        return not bool((self.cells == Cell.EMPTY).any())

    def is_terminal(self) -> bool:
        """Check if the round is over (someone has a line, or the board is full)."""
        return (
            self.has_line(Cell.MARK_A)
            or self.has_line(Cell.MARK_B)
            or self.is_full()
        )

    def check_move(self, index) -> None:
        """
        Make sure a mark could go on `index`.

        Raises:
            InvalidMoveError: if the index is off the board or the cell is taken.
        """
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise InvalidMoveError(index, "not a cell index")
        if not 0 <= index < BOARD_SIZE:
            raise InvalidMoveError(index, f"must be 0-{BOARD_SIZE - 1}")
        if self.cells[index] != Cell.EMPTY:
            raise InvalidMoveError(index, "cell is already occupied")

    def place(self, index: int, mark: Cell) -> None:
        """
        Put a mark on an empty cell.

        Raises:
            InvalidMoveError: if the index is off the board or the cell is taken.
        """
        self.check_move(index)
        if mark == Cell.EMPTY:
            raise ValueError("Cannot place an EMPTY mark")
        self.cells[index] = mark

    def clear(self) -> None:
        """Empty every cell."""
        self.cells[:] = Cell.EMPTY

    def copy(self) -> "Board":
        """Create an independent copy of the board."""
        new_board = Board()
        new_board.cells = self.cells.copy()
        return new_board

    @contextmanager
    def trial(self, index: int, mark: Cell) -> Iterator["Board"]:
        """
        Temporarily place a mark, restoring the cell on exit.

        Raises:
            InvalidMoveError: if the index is off the board or the cell is taken.
        """
        self.check_move(index)
        self.cells[index] = mark
        try:
            yield self
        finally:
            self.cells[index] = Cell.EMPTY

    def render(self) -> str:
        """Render the board as a 3-line text grid."""
        rows = []
        for start in range(0, BOARD_SIZE, 3):
            symbols = [_SYMBOLS[Cell(int(c))] for c in self.cells[start:start + 3]]
            rows.append(" " + " | ".join(symbols))
        return "\n---+---+---\n".join(rows)


def winning_line(board: Board) -> Optional[Tuple[int, int, int]]:
    """
    Get the winning line if there is one.

    Returns:
        The line as 3 cell indices, or None.
    """
    for mark in (Cell.MARK_A, Cell.MARK_B):
        occupied = board.mask(mark)
        for line, pattern in zip(WINNING_LINES, WIN_PATTERNS):
            if occupied & pattern == pattern:
                return line
    return None


def winner_mark(board: Board) -> Optional[Cell]:
    """Get the mark that owns a winning line, or None."""
    if board.has_line(Cell.MARK_A):
        return Cell.MARK_A
    if board.has_line(Cell.MARK_B):
        return Cell.MARK_B
    return None
