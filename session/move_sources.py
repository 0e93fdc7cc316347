"""
Move sources for a TicTacToe match.

The controller asks a source for exactly one move per turn and gets back a
concurrent.futures.Future that resolves to a cell index. A source must be
able to retire its pending request (cancel) when the round or match is reset,
so a late answer can never land on a board that has since been cleared.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Optional, Tuple

from engine.board import Board
from engine.move_validator import MoveValidator
from engine.random_source import RandomSource
from engine.search import SearchEngine

logger = logging.getLogger(__name__)


class MoveSource:
    """Interface shared by every move source."""

    def request(self, board: Board) -> Future:
        """Start waiting for one move on `board`."""
        raise NotImplementedError

    def cancel(self) -> None:
        """Retire the pending request, if any."""


class HumanMoveSource(MoveSource):
    """
    Moves typed, clicked or otherwise supplied from outside.

    The front end calls submit() with whatever index the user picked. Only an
    index of an empty cell on the requested board resolves the pending move;
    anything else is dropped and the source keeps waiting.
    """

    def __init__(self):
        self.validator = MoveValidator()
        self._lock = threading.Lock()
        self._pending: Optional[Future] = None
        self._board: Optional[Board] = None
        self._requested = threading.Event()

    @property
    def is_waiting(self) -> bool:
        """True while a move has been requested and not yet supplied."""
        return self._requested.is_set()

    def request(self, board: Board) -> Future:
        future = Future()
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = future
            self._board = board
            self._requested.set()
        return future

    def submit(self, index) -> bool:
        """
        Offer a move.

        Args:
            index: The cell the user picked.

        Returns:
            True if the move was accepted, False if it was ignored.
        """
        with self._lock:
            future = self._pending
            if future is None:
                return False

            result = self.validator.validate_move(self._board, index)
            if not result.is_valid:
                logger.debug("Ignoring move %r: %s", index, result.error_message)
                return False

            self._pending = None
            self._board = None
            self._requested.clear()

            if not future.set_running_or_notify_cancel():
                return False

        future.set_result(index)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = None
            self._board = None
            self._requested.clear()

    def wait_for_request(self, timeout: Optional[float] = None) -> bool:
        """Block until a move is requested. Returns False on timeout."""
        return self._requested.wait(timeout)


class EngineMoveSource(MoveSource):
    """
    Moves chosen by the search engine.

    The search itself is bounded and runs straight away on a copy of the
    board; only the answer is held back by a random thinking delay.
    """

    def __init__(
        self,
        engine: SearchEngine,
        rng: Optional[RandomSource] = None,
        delay_ms: Optional[Tuple[int, int]] = (500, 1500),
    ):
        """
        Args:
            engine: Search engine that picks the move.
            rng: Randomness for the thinking delay.
            delay_ms: (min, max) thinking delay in milliseconds, or None for none.
        """
        self.engine = engine
        self.rng = rng or RandomSource()
        self.delay_ms = delay_ms
        self._lock = threading.Lock()
        self._pending: Optional[Future] = None
        self._timer: Optional[threading.Timer] = None

    def _think_time(self) -> float:
        if not self.delay_ms:
            return 0.0
        low, high = self.delay_ms
        return self.rng.randint(low, high) / 1000.0

    def request(self, board: Board) -> Future:
        future = Future()
        move = self.engine.choose_move(board)
        delay = self._think_time()

        if delay <= 0:
            future.set_running_or_notify_cancel()
            future.set_result(move)
            return future

        timer = threading.Timer(delay, self._resolve, args=(future, move))
        timer.daemon = True
        with self._lock:
            self._pending = future
            self._timer = timer
        timer.start()
        return future

    def _resolve(self, future: Future, move: int) -> None:
        with self._lock:
            if self._pending is future:
                self._pending = None
                self._timer = None
            if not future.set_running_or_notify_cancel():
                return
        future.set_result(move)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            if self._pending is not None:
                self._pending.cancel()
            self._timer = None
            self._pending = None
