"""
Engine module for TicTacToe.
Handles the board, rules, evaluation, and the computer's move search.
"""

from .board import Board, Cell, WIN_PATTERNS, WINNING_LINES, winning_line, winner_mark
from .errors import InvalidMoveError, PreconditionViolation, RandomnessUnavailable
from .evaluator import Evaluator
from .move_validator import MoveValidator
from .random_source import RandomSource
from .search import SearchEngine, RandomTieBreak, FirstFoundTieBreak
