"""
Errors raised by the TicTacToe engine and match session.
"""

from typing import Optional


class TicTacToeError(Exception):
    """Base class for every error raised by this project."""


class InvalidMoveError(TicTacToeError):
    """
    A move points outside the board or at an occupied cell.

    Raised before the board is touched, so the board is always
    left exactly as it was.
    """

    def __init__(self, index: Optional[int], reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid move {index!r}: {reason}")


class PreconditionViolation(TicTacToeError):
    """The search engine was asked for a move on a board with no empty cell."""


class RandomnessUnavailable(TicTacToeError):
    """The randomness source could not produce a value."""
