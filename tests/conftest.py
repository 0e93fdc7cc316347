"""
Shared pytest fixtures for the TicTacToe tests.
"""

from concurrent.futures import Future
from typing import List

import pytest

from engine.random_source import RandomSource
from session.config import MatchConfig
from session.listener import MatchListener
from session.move_sources import HumanMoveSource, MoveSource


class FixedRandom(RandomSource):
    """RandomSource that replays scripted dice rolls and always picks the first item."""

    def __init__(self, rolls=()):
        super().__init__(seed=0)
        self.rolls = list(rolls)

    def randint(self, low: int, high: int) -> int:
        return self.rolls.pop(0) if self.rolls else low

    def choice(self, items):
        return items[0]


class ScriptedMoveSource(MoveSource):
    """Answers each request immediately with the next scripted move."""

    def __init__(self, moves: List[int]):
        self.moves = list(moves)
        self.requests = 0
        self.cancels = 0

    def request(self, board) -> Future:
        self.requests += 1
        future = Future()
        if self.moves:
            future.set_running_or_notify_cancel()
            future.set_result(self.moves.pop(0))
        return future

    def cancel(self) -> None:
        self.cancels += 1


class RecordingListener(MatchListener):
    """Keeps every event it receives as (name, args)."""

    def __init__(self):
        self.events = []

    def names(self):
        return [name for name, _ in self.events]

    def of(self, name):
        return [args for event, args in self.events if event == name]

    def opponent_named(self, player):
        self.events.append(("opponent_named", (player,)))

    def starter_decided(self, starter, human_roll, engine_roll):
        self.events.append(("starter_decided", (starter, human_roll, engine_roll)))

    def turn_started(self, player):
        self.events.append(("turn_started", (player,)))

    def cell_marked(self, index, mark):
        self.events.append(("cell_marked", (index, mark)))

    def board_cleared(self):
        self.events.append(("board_cleared", ()))

    def move_rejected(self, player, index, reason):
        self.events.append(("move_rejected", (player, index, reason)))

    def turn_winner(self, player, line):
        self.events.append(("turn_winner", (player, line)))

    def draw(self):
        self.events.append(("draw", ()))

    def match_winner(self, player):
        self.events.append(("match_winner", (player,)))


@pytest.fixture
def rng():
    return RandomSource(seed=1234)


@pytest.fixture
def config():
    cfg = MatchConfig()
    cfg.THINK_DELAY_MS = None
    return cfg


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def human():
    return HumanMoveSource()
