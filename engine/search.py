"""
Search engine for TicTacToe.
Uses depth-limited Minimax with a pluggable tie-break to choose the computer's move.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .board import Board, Cell, BOARD_SIZE
from .errors import PreconditionViolation
from .evaluator import Evaluator
from .random_source import RandomSource

logger = logging.getLogger(__name__)

MAX_DEPTH = BOARD_SIZE


@dataclass
class SearchResult:
    """Score of a node and the move that leads to it (None at a leaf)."""
    score: int
    position: Optional[int] = None


class FirstFoundTieBreak:
    """
    Deterministic tie-break: keep the first strictly better move found
    while scanning moves in ascending index order.
    """

    def select(self, candidates: List[SearchResult], best: SearchResult) -> SearchResult:
        return best


class RandomTieBreak:
    """
    Pick uniformly among every move that scores as well as the best one.

    On an empty board (every cell is a candidate) the pick is uniform over
    all candidates whatever their score, so the opening is never fixed.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng or RandomSource()

    def select(self, candidates: List[SearchResult], best: SearchResult) -> SearchResult:
        if len(candidates) == BOARD_SIZE:
            return self.rng.choice(candidates)

        tied = [c for c in candidates if c.score == best.score]
        return self.rng.choice(tied)


class SearchEngine:
    """
    Chooses moves for the computer with the Minimax algorithm.

    The computer is the maximizing side and the human the minimizing one.
    Leaves (depth exhausted or no moves left) are scored by the Evaluator.
    """

    def __init__(
        self,
        depth: int = 1,
        mark: Cell = Cell.MARK_B,
        tie_break=None,
        evaluator: Optional[Evaluator] = None,
    ):
        """
        Initialize the search engine.

        Args:
            depth: How many plies to look ahead (1-9).
            mark: Which mark the computer plays (default: MARK_B).
            tie_break: Tie-break strategy (default: RandomTieBreak).
            evaluator: Leaf evaluator (default: Evaluator for `mark`).
        """
        if not 1 <= depth <= MAX_DEPTH:
            raise ValueError(f"Search depth must be 1-{MAX_DEPTH}, got {depth}")

        self.depth = depth
        self.mark = mark
        self.tie_break = tie_break or RandomTieBreak()
        self.evaluator = evaluator or Evaluator(mark)

        # Keep track of how many nodes we've visited (for debugging)
        self.moves_evaluated = 0

    def choose_move(self, board: Board) -> int:
        """
        Get the computer's move for the current position.

        The search runs on a private copy, so `board` is never modified.

        Args:
            board: Current board.

        Returns:
            Index of the chosen cell.

        Raises:
            PreconditionViolation: if the board has no empty cell.
        """
        if not board.available_moves():
            raise PreconditionViolation("choose_move called on a full board")

        self.moves_evaluated = 0
        scratch = board.copy()
        result = self.minimax(scratch, self.depth, self.mark)

        logger.debug(
            "Search depth %d evaluated %d positions. Best move: %s (score: %d)",
            self.depth, self.moves_evaluated, result.position, result.score,
        )
        return result.position

    def minimax(self, board: Board, depth: int, side: Cell) -> SearchResult:
        """
        Minimax over the empty cells of `board`.

        Every trial mark is undone before returning, so `board` comes back
        unchanged.

        Args:
            board: Board to search (mutated and restored).
            depth: Remaining plies.
            side: The mark to move at this node.

        Returns:
            SearchResult with the node's score and the chosen move.
        """
        self.moves_evaluated += 1

        moves = board.available_moves()
        if depth == 0 or not moves:
            return SearchResult(score=self.evaluator.evaluate(board))

        maximizing = side == self.mark
        best = SearchResult(score=-10000 if maximizing else 10000)
        candidates = []

        for move in moves:
            with board.trial(move, side):
                score = self.minimax(board, depth - 1, side.opposite()).score

            candidates.append(SearchResult(score=score, position=move))

            if (maximizing and score > best.score) or (not maximizing and score < best.score):
                best = SearchResult(score=score, position=move)

        return self.tie_break.select(candidates, best)
