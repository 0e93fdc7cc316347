"""
Round controller for a TicTacToe match.

Game flow:
1. Setup: create the human and the engine players, scores at zero
2. Decide starter: both roll a die, the higher roll starts every round
3. Rounds: players alternate until someone has a line or the board is full
4. The first player to WIN_THRESHOLD round wins takes the match
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from engine.board import Board, Cell, winning_line, winner_mark
from engine.errors import InvalidMoveError, RandomnessUnavailable
from engine.random_source import RandomSource
from engine.search import RandomTieBreak, SearchEngine

from .config import MatchConfig
from .listener import MatchListener
from .move_sources import EngineMoveSource, MoveSource
from .players import Player, Role, create_players

logger = logging.getLogger(__name__)


class MatchPhase(Enum):
    """States of the match state machine."""
    SETUP = "setup"
    DECIDE_STARTER = "decide_starter"
    IN_PROGRESS = "in_progress"
    ROUND_RESOLVED = "round_resolved"
    MATCH_RESOLVED = "match_resolved"


@dataclass
class MoveRecord:
    """A move accepted onto the board."""
    role: Role
    index: int
    mark: Cell


@dataclass
class RoundRecord:
    """How a finished round ended."""
    number: int
    winner: Optional[Role]                      # None for a draw
    line: Optional[Tuple[int, int, int]]
    moves: List[MoveRecord]


@dataclass
class MatchSession:
    """
    Everything that changes during one match.

    Owned by the controller; the search engine only ever sees copies of
    the board.
    """
    human: Player
    engine: Player
    board: Board = field(default_factory=Board)
    starting_player: Optional[Player] = None
    current_player: Optional[Player] = None
    round_number: int = 1
    moves: List[MoveRecord] = field(default_factory=list)
    rounds: List[RoundRecord] = field(default_factory=list)
    match_winner: Optional[Player] = None

    @property
    def players(self) -> Tuple[Player, Player]:
        return self.human, self.engine

    def player_for(self, mark: Cell) -> Player:
        """Get the player who plays `mark`."""
        return self.human if self.human.mark == mark else self.engine

    def other(self, player: Player) -> Player:
        """Get the opponent of `player`."""
        return self.engine if player is self.human else self.human


class MatchController:
    """
    Drives a match: asks the player to move for one move at a time, applies it,
    and decides when rounds and the match are over.

    Only one move is ever in flight. Starting a new match first retires the
    pending request, so a late answer for an old board is dropped.
    """

    def __init__(
        self,
        human_source: MoveSource,
        engine_source: Optional[MoveSource] = None,
        listener: Optional[MatchListener] = None,
        config: Optional[MatchConfig] = None,
        rng: Optional[RandomSource] = None,
    ):
        """
        Initialize the controller.

        Args:
            human_source: Where the human's moves come from.
            engine_source: Where the engine's moves come from
                (default: SearchEngine at the configured depth).
            listener: Receives render and outcome events.
            config: Match settings (default: MatchConfig()).
            rng: Randomness for dice, names, and the default engine.
        """
        self.config = config or MatchConfig()
        self.rng = rng or RandomSource()
        self.listener = listener or MatchListener()

        if engine_source is None:
            engine = SearchEngine(
                depth=self.config.SEARCH_DEPTH,
                mark=Cell.MARK_B,
                tie_break=RandomTieBreak(self.rng),
            )
            engine_source = EngineMoveSource(engine, self.rng, self.config.THINK_DELAY_MS)

        self.sources: Dict[Role, MoveSource] = {
            Role.HUMAN: human_source,
            Role.ENGINE: engine_source,
        }

        self.phase = MatchPhase.SETUP
        self.session: Optional[MatchSession] = None
        self._pending: Optional[Future] = None
        self._lock = threading.RLock()

        # First error raised while handling a move; the match stops on it
        self.error: Optional[BaseException] = None

    # ==================== MATCH LIFECYCLE ====================

    @property
    def is_match_over(self) -> bool:
        return self.phase == MatchPhase.MATCH_RESOLVED

    @property
    def awaiting(self) -> Optional[Player]:
        """The player whose move is being waited for, if any."""
        with self._lock:
            if self._pending is None or self.session is None:
                return None
            return self.session.current_player

    def new_match(self) -> MatchSession:
        """
        Set up a new match and decide who starts.

        Any pending move request from a previous match is retired first.

        Returns:
            The new MatchSession.

        Raises:
            RandomnessUnavailable: if the randomness source fails.
        """
        with self._lock:
            self._retire_pending()
            self.error = None

            self.phase = MatchPhase.SETUP
            engine_name = f"{self.rng.choice(self.config.ENGINE_NAMES)}(AI)"
            human, engine = create_players(self.config.HUMAN_NAME, engine_name)
            self.session = MatchSession(human=human, engine=engine)
            logger.info("New match: %s vs %s", human.name, engine.name)
            self.listener.opponent_named(engine)

            self.phase = MatchPhase.DECIDE_STARTER
            human_roll, engine_roll = self._roll_dice()
            starter = human if human_roll > engine_roll else engine
            self.session.starting_player = starter
            self.session.current_player = starter
            logger.info("Dice: %d - %d, %s starts", human_roll, engine_roll, starter.name)
            self.listener.starter_decided(starter, human_roll, engine_roll)

            return self.session

    def start(self) -> None:
        """Start the first round of the match set up by new_match()."""
        with self._lock:
            if self.session is None or self.phase != MatchPhase.DECIDE_STARTER:
                raise RuntimeError(f"Cannot start a match from phase {self.phase.value}")
            self._begin_round()
            self.raise_if_failed()

    def play(self) -> MatchSession:
        """Set up a new match and start it."""
        with self._lock:
            session = self.new_match()
            self.start()
            return session

    def submit(self, index) -> bool:
        """
        Offer the human's move to the human move source.

        Returns:
            True if the move was accepted, False if it was ignored.

        Raises:
            Whatever stopped the match while the move was being handled.
        """
        self.raise_if_failed()
        accepted = self.sources[Role.HUMAN].submit(index)
        self.raise_if_failed()
        return accepted

    def raise_if_failed(self) -> None:
        """Re-raise the error that stopped the match, if there was one."""
        if self.error is not None:
            raise self.error

    def cancel(self) -> None:
        """Stop waiting for the current move (e.g. when the front end shuts down)."""
        with self._lock:
            self._retire_pending()

    # ==================== TURNS ====================

    def _roll_dice(self) -> Tuple[int, int]:
        faces = self.config.DICE_FACES
        for _ in range(self.config.MAX_DICE_REROLLS + 1):
            human_roll = self.rng.randint(1, faces)
            engine_roll = self.rng.randint(1, faces)
            if human_roll != engine_roll:
                return human_roll, engine_roll
        raise RandomnessUnavailable(
            f"Dice tied {self.config.MAX_DICE_REROLLS + 1} times in a row"
        )

    def _begin_round(self) -> None:
        session = self.session
        session.board.clear()
        session.moves = []
        session.current_player = session.starting_player
        self.listener.board_cleared()

        self.phase = MatchPhase.IN_PROGRESS
        logger.info("Round %d: %s starts", session.round_number, session.current_player.name)
        self._request_move()

    def _request_move(self) -> None:
        player = self.session.current_player
        self.listener.turn_started(player)

        future = self.sources[player.role].request(self.session.board)
        self._pending = future
        future.add_done_callback(self._on_move)

    def _retire_pending(self) -> None:
        future = self._pending
        self._pending = None
        if future is not None:
            future.cancel()
        for source in self.sources.values():
            source.cancel()

    def _on_move(self, future: Future) -> None:
        with self._lock:
            # Stale answer from a request that has since been retired
            if future is not self._pending or future.cancelled():
                return
            self._pending = None

            # Done-callbacks swallow exceptions, so keep it for raise_if_failed
            try:
                self._apply_move(future.result())
            except Exception as e:
                if self.error is None:
                    self.error = e
                    logger.error("Match stopped: %s", e)
                self._retire_pending()

    def _apply_move(self, index) -> bool:
        session = self.session
        player = session.current_player

        try:
            session.board.place(index, player.mark)
        except InvalidMoveError as e:
            logger.warning("Rejected move from %s: %s", player.name, e)
            self.listener.move_rejected(player, index, e.reason)
            self._request_move()
            return False

        session.moves.append(MoveRecord(role=player.role, index=index, mark=player.mark))
        self.listener.cell_marked(index, player.mark)
        session.current_player = session.other(player)

        if session.board.is_terminal():
            self._resolve_round()
        else:
            self._request_move()
        return True

    # ==================== OUTCOMES ====================

    def _resolve_round(self) -> None:
        session = self.session
        self.phase = MatchPhase.ROUND_RESOLVED

        mark = winner_mark(session.board)
        winner = session.player_for(mark) if mark is not None else None
        line = winning_line(session.board) if winner is not None else None

        session.rounds.append(RoundRecord(
            number=session.round_number,
            winner=winner.role if winner else None,
            line=line,
            moves=list(session.moves),
        ))

        if winner is not None:
            winner.wins += 1
            logger.info(
                "Round %d won by %s (%d-%d)",
                session.round_number, winner.name, session.human.wins, session.engine.wins,
            )
            self.listener.turn_winner(winner, line)
        else:
            logger.info("Round %d is a draw", session.round_number)
            self.listener.draw()

        if winner is not None and winner.wins >= self.config.WIN_THRESHOLD:
            self.phase = MatchPhase.MATCH_RESOLVED
            session.match_winner = winner
            logger.info("%s wins the match", winner.name)
            self.listener.match_winner(winner)
            return

        session.round_number += 1
        self._begin_round()
