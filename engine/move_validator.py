"""
Move validator for TicTacToe.
Validates that moves follow the rules before they reach the board.
"""

from typing import Optional
from dataclasses import dataclass

from .board import Board
from .errors import InvalidMoveError


@dataclass
class ValidationResult:
    """Result of move validation."""
    is_valid: bool
    error_message: Optional[str] = None


class MoveValidator:
    """
    Validates TicTacToe moves.

    Rules:
    1. Index must be a cell on the board (0-8)
    2. Can only place on empty cells
    3. Round must not be over
    """

    def validate_move(self, board: Board, index) -> ValidationResult:
        """
        Validate a move.

        Args:
            board: Current board.
            index: Cell to place a mark on.

        Returns:
            ValidationResult with is_valid and error_message.
        """
        if board.is_terminal():
            return ValidationResult(
                is_valid=False,
                error_message="Round is already over!"
            )

        try:
            board.check_move(index)
        except InvalidMoveError as e:
            return ValidationResult(is_valid=False, error_message=e.reason)

        return ValidationResult(is_valid=True)

    def is_valid(self, board: Board, index) -> bool:
        """Shortcut for `validate_move(...).is_valid`."""
        return self.validate_move(board, index).is_valid
