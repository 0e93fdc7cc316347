"""
Static evaluation of a TicTacToe board.

Each of the 8 winning lines is scored from the computer's point of view and
the line scores are summed:

    1    one computer mark on an otherwise empty line
    10   two computer marks, third cell free
    100  a complete computer line

Human marks score the same magnitudes with a negative sign, and a line that
holds marks of both players is dead and scores 0.
"""

from typing import Sequence

from .board import Board, Cell, WINNING_LINES


def evaluate_line(cells: Sequence[int], a: int, b: int, c: int,
                  mine: Cell = Cell.MARK_B) -> int:
    """
    Score a single line, walking its cells in the order a, b, c.

    Args:
        cells: The 9 cell values.
        a, b, c: Indices of the line's cells.
        mine: The computer's mark. The other mark is the human's.

    Returns:
        The line score (positive favours the computer).
    """
    theirs = mine.opposite()
    score = 0

    # First cell
    if cells[a] == mine:
        score = 1
    elif cells[a] == theirs:
        score = -1

    # Second cell
    if cells[b] == mine:
        if score == 1:
            score = 10
        elif score == -1:
            return 0
        else:
            score = 1
    elif cells[b] == theirs:
        if score == -1:
            score = -10
        elif score == 1:
            return 0
        else:
            score = -1

    # Third cell. The human branch tests `score > 1`, not `score > 0`: a
    # single computer mark followed by a human mark scores -1, not 0.
    if cells[c] == mine:
        if score > 0:
            score *= 10
        elif score < 0:
            return 0
        else:
            score = 1
    elif cells[c] == theirs:
        if score < 0:
            score *= 10
        elif score > 1:
            return 0
        else:
            score = -1

    return score


class Evaluator:
    """Scores a board for one side without searching."""

    def __init__(self, mark: Cell = Cell.MARK_B):
        """
        Args:
            mark: The computer's mark; scores are from its point of view.
        """
        self.mark = mark

    def evaluate(self, board: Board) -> int:
        """Sum the line scores over all 8 winning lines."""
        cells = board.cells.tolist()
        return sum(
            evaluate_line(cells, a, b, c, self.mark)
            for a, b, c in WINNING_LINES
        )
