"""
Tests for the match controller: starter dice, turns, rounds, and the match.
"""

import time

import pytest

from engine.board import Board, Cell
from engine.errors import RandomnessUnavailable
from engine.random_source import RandomSource
from engine.search import FirstFoundTieBreak, SearchEngine
from session.controller import MatchController, MatchPhase
from session.move_sources import EngineMoveSource
from session.players import Role

from conftest import FixedRandom, RecordingListener, ScriptedMoveSource

HUMAN_FIRST = [5, 1]
ENGINE_FIRST = [1, 5]


def make_controller(human, engine_moves, listener, config, rolls=HUMAN_FIRST):
    engine = ScriptedMoveSource(engine_moves)
    controller = MatchController(
        human_source=human,
        engine_source=engine,
        listener=listener,
        config=config,
        rng=FixedRandom(rolls),
    )
    return controller, engine


# ════════════════════════════════════════════════════════════════════════════
#  SETUP & STARTER
# ════════════════════════════════════════════════════════════════════════════

class TestSetup:
    def test_new_match_creates_players(self, human, listener, config):
        controller, _ = make_controller(human, [], listener, config)
        session = controller.new_match()

        assert session.human.role == Role.HUMAN
        assert session.human.mark == Cell.MARK_A
        assert session.human.name == "You"
        assert session.engine.role == Role.ENGINE
        assert session.engine.mark == Cell.MARK_B
        assert session.engine.name == "Leanne(AI)"
        assert session.human.wins == session.engine.wins == 0
        assert controller.phase == MatchPhase.DECIDE_STARTER

    def test_higher_roll_starts(self, human, listener, config):
        controller, _ = make_controller(human, [], listener, config, rolls=[2, 4])
        session = controller.new_match()
        assert session.starting_player is session.engine
        assert session.current_player is session.engine
        assert listener.of("starter_decided") == [(session.engine, 2, 4)]

    def test_ties_are_rerolled(self, human, listener, config):
        controller, _ = make_controller(human, [], listener, config, rolls=[3, 3, 2, 2, 4, 1])
        session = controller.new_match()
        assert session.starting_player is session.human
        assert listener.of("starter_decided") == [(session.human, 4, 1)]

    def test_stuck_dice_raise(self, human, listener, config):
        controller, _ = make_controller(human, [], listener, config, rolls=[])
        with pytest.raises(RandomnessUnavailable):
            controller.new_match()

    def test_engine_name_from_roster(self, human, listener, config):
        controller = MatchController(human, listener=listener, config=config, rng=RandomSource(11))
        session = controller.new_match()
        assert session.engine.name.endswith("(AI)")
        assert session.engine.name[:-4] in config.ENGINE_NAMES

    def test_start_requires_new_match(self, human, listener, config):
        controller, _ = make_controller(human, [], listener, config)
        with pytest.raises(RuntimeError):
            controller.start()


# ════════════════════════════════════════════════════════════════════════════
#  TURNS
# ════════════════════════════════════════════════════════════════════════════

class TestTurns:
    def test_rejected_human_move_leaves_board_valid(self, human, listener, config):
        controller, _ = make_controller(human, [4, 2], listener, config)
        session = controller.play()

        assert human.submit(0)
        assert human.submit(1)
        assert human.submit(2) is False

        assert session.board == Board([1, 1, 2,
                                       0, 2, 0,
                                       0, 0, 0])
        assert [m.index for m in session.moves] == [0, 4, 1, 2]
        assert session.current_player is session.human
        assert controller.awaiting is session.human
        assert human.is_waiting

    def test_invalid_engine_move_is_re_requested(self, human, listener, config):
        controller, engine = make_controller(human, [0, 42, 4], listener, config)
        session = controller.play()

        assert human.submit(0)

        assert session.board[4] == Cell.MARK_B
        assert session.board[0] == Cell.MARK_A
        assert engine.requests == 3
        rejected = listener.of("move_rejected")
        assert [(p.role, i) for p, i, _ in rejected] == [(Role.ENGINE, 0), (Role.ENGINE, 42)]

    def test_engine_starts_when_it_wins_the_dice(self, human, listener, config):
        controller, engine = make_controller(human, [4], listener, config, rolls=ENGINE_FIRST)
        session = controller.play()
        assert session.board[4] == Cell.MARK_B
        assert engine.requests == 1
        assert human.is_waiting

    def test_events_for_a_move(self, human, listener, config):
        controller, _ = make_controller(human, [4], listener, config)
        session = controller.play()
        human.submit(0)
        assert listener.of("cell_marked") == [(0, Cell.MARK_A), (4, Cell.MARK_B)]
        assert [p.role for (p,) in listener.of("turn_started")] == [
            Role.HUMAN, Role.ENGINE, Role.HUMAN,
        ]


# ════════════════════════════════════════════════════════════════════════════
#  ROUNDS & MATCH
# ════════════════════════════════════════════════════════════════════════════

class TestRounds:
    def test_human_column_win(self, human, listener, config):
        controller, _ = make_controller(human, [1, 2], listener, config)
        session = controller.play()

        for move in (0, 3, 6):
            assert human.submit(move)

        assert session.human.wins == 1
        assert session.engine.wins == 0
        assert listener.of("turn_winner") == [(session.human, (0, 3, 6))]
        assert session.rounds[0].winner == Role.HUMAN
        assert [m.index for m in session.rounds[0].moves] == [0, 1, 3, 2, 6]

        # Next round is ready
        assert session.board == Board()
        assert session.current_player is session.starting_player is session.human
        assert session.round_number == 2
        assert controller.phase == MatchPhase.IN_PROGRESS
        assert human.is_waiting

    def test_draw_changes_no_score(self, human, listener, config):
        controller, _ = make_controller(human, [4, 1, 6, 5], listener, config)
        session = controller.play()

        for move in (0, 8, 7, 2, 3):
            assert human.submit(move)

        assert listener.of("draw") == [()]
        assert listener.of("turn_winner") == []
        assert session.human.wins == session.engine.wins == 0
        assert session.rounds[0].winner is None
        assert session.board == Board()

    def test_engine_round_win(self, human, listener, config):
        controller, _ = make_controller(human, [0, 1, 2], listener, config, rolls=ENGINE_FIRST)
        session = controller.play()

        human.submit(3)
        human.submit(4)

        assert session.engine.wins == 1
        assert session.human.wins == 0
        # The engine started the match, so it starts the next round too
        assert session.starting_player is session.engine
        assert listener.of("turn_winner") == [(session.engine, (0, 1, 2))]

    def test_match_ends_at_three_wins(self, human, listener, config):
        controller, engine = make_controller(human, [1, 2] * 3, listener, config)
        session = controller.play()

        for _ in range(3):
            for move in (0, 3, 6):
                assert human.submit(move)

        assert controller.phase == MatchPhase.MATCH_RESOLVED
        assert controller.is_match_over
        assert session.match_winner is session.human
        assert session.human.wins == 3
        assert listener.of("match_winner") == [(session.human,)]
        assert len(session.rounds) == 3

        # No more moves are asked for
        assert not human.is_waiting
        assert controller.awaiting is None
        assert engine.requests == 6
        assert human.submit(4) is False

    def test_new_match_after_match_over(self, human, listener, config):
        controller, _ = make_controller(human, [1, 2] * 3 + [4], listener, config,
                                        rolls=HUMAN_FIRST * 2)
        controller.play()
        for _ in range(3):
            for move in (0, 3, 6):
                human.submit(move)

        session = controller.play()
        assert session.human.wins == 0
        assert session.board == Board()
        assert controller.phase == MatchPhase.IN_PROGRESS
        assert human.submit(0)
        assert session.board[4] == Cell.MARK_B


# ════════════════════════════════════════════════════════════════════════════
#  CANCELLATION
# ════════════════════════════════════════════════════════════════════════════

class TestCancellation:
    def test_restart_retires_pending_human_move(self, human, listener, config):
        controller, _ = make_controller(human, [4], listener, config,
                                        rolls=HUMAN_FIRST * 2)
        old = controller.play()
        new = controller.play()

        assert new is not old
        assert human.submit(0)
        assert old.board == Board()
        assert new.board[0] == Cell.MARK_A

    def test_stale_engine_move_is_dropped(self, human, listener, config):
        engine = EngineMoveSource(
            SearchEngine(depth=1, tie_break=FirstFoundTieBreak()),
            RandomSource(0),
            delay_ms=(50, 50),
        )
        controller = MatchController(
            human_source=human,
            engine_source=engine,
            listener=listener,
            config=config,
            rng=FixedRandom(ENGINE_FIRST + HUMAN_FIRST),
        )
        old = controller.play()
        assert controller.awaiting is old.engine

        new = controller.new_match()
        time.sleep(0.2)

        assert old.board == Board()
        assert new.board == Board()
        assert listener.of("cell_marked") == []

    def test_delayed_engine_move_lands(self, human, listener, config):
        engine = EngineMoveSource(
            SearchEngine(depth=1, tie_break=FirstFoundTieBreak()),
            RandomSource(0),
            delay_ms=(10, 10),
        )
        controller = MatchController(
            human_source=human,
            engine_source=engine,
            listener=listener,
            config=config,
            rng=FixedRandom(ENGINE_FIRST),
        )
        session = controller.play()
        assert human.wait_for_request(timeout=2)
        assert session.board[4] == Cell.MARK_B


# ════════════════════════════════════════════════════════════════════════════
#  FAILURES
# ════════════════════════════════════════════════════════════════════════════

class BreakableRandom(FixedRandom):
    """FixedRandom whose choice() fails once `broken` is set."""

    def __init__(self, rolls=()):
        super().__init__(rolls)
        self.broken = False

    def choice(self, items):
        if self.broken:
            raise RandomnessUnavailable("entropy pool gone")
        return super().choice(items)


class ExplodingListener(RecordingListener):
    """Raises on the first cell_marked event."""

    def cell_marked(self, index, mark):
        super().cell_marked(index, mark)
        raise RuntimeError("render failed")


class TestFailures:
    def test_randomness_failure_mid_match_surfaces(self, human, listener, config):
        rng = BreakableRandom(HUMAN_FIRST)
        controller = MatchController(human, listener=listener, config=config, rng=rng)
        session = controller.play()

        rng.broken = True
        with pytest.raises(RandomnessUnavailable):
            controller.submit(0)

        assert isinstance(controller.error, RandomnessUnavailable)
        assert controller.awaiting is None
        assert not human.is_waiting
        assert session.board[0] == Cell.MARK_A

        # Stays failed until a new match
        with pytest.raises(RandomnessUnavailable):
            controller.submit(1)

    def test_listener_failure_on_immediate_move_surfaces_from_play(self, human, config):
        controller, _ = make_controller(human, [4], ExplodingListener(), config,
                                        rolls=ENGINE_FIRST)
        with pytest.raises(RuntimeError, match="render failed"):
            controller.play()
        assert not human.is_waiting

    def test_failure_on_timer_thread_is_kept(self, human, config):
        engine = EngineMoveSource(
            SearchEngine(depth=1, tie_break=FirstFoundTieBreak()),
            RandomSource(0),
            delay_ms=(10, 10),
        )
        controller = MatchController(
            human_source=human,
            engine_source=engine,
            listener=ExplodingListener(),
            config=config,
            rng=FixedRandom(ENGINE_FIRST),
        )
        controller.play()

        deadline = time.time() + 2
        while controller.error is None and time.time() < deadline:
            time.sleep(0.01)

        with pytest.raises(RuntimeError, match="render failed"):
            controller.raise_if_failed()

    def test_new_match_clears_error(self, human, listener, config):
        rng = BreakableRandom(HUMAN_FIRST * 2)
        controller = MatchController(human, listener=listener, config=config, rng=rng)
        controller.play()
        rng.broken = True
        with pytest.raises(RandomnessUnavailable):
            controller.submit(0)

        rng.broken = False
        controller.play()
        assert controller.error is None
        assert human.is_waiting
