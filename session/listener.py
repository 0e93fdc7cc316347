"""
Notifications sent by the match controller.

Front ends subclass MatchListener and override the events they care about;
every method defaults to doing nothing and no return value is used.
"""

from typing import Optional, Tuple

from engine.board import Cell
from .players import Player


class MatchListener:
    """Receives render and outcome events from a MatchController."""

    def opponent_named(self, player: Player) -> None:
        pass

    def starter_decided(self, starter: Player, human_roll: int, engine_roll: int) -> None:
        pass

    def turn_started(self, player: Player) -> None:
        pass

    def cell_marked(self, index: int, mark: Cell) -> None:
        pass

    def board_cleared(self) -> None:
        pass

    def move_rejected(self, player: Player, index, reason: str) -> None:
        pass

    def turn_winner(self, player: Player, line: Optional[Tuple[int, int, int]]) -> None:
        pass

    def draw(self) -> None:
        pass

    def match_winner(self, player: Player) -> None:
        pass
