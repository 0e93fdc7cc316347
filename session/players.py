"""
Players of a TicTacToe match.
Tracks who is who, which mark they play, and how many rounds they have won.
"""

from dataclasses import dataclass
from enum import Enum

from engine.board import Cell


class Role(Enum):
    """The two kinds of player in a match."""
    HUMAN = "human"
    ENGINE = "engine"

    def opposite(self) -> "Role":
        """Get the other role."""
        return Role.ENGINE if self == Role.HUMAN else Role.HUMAN


@dataclass
class Player:
    """
    One side of the match.
    """
    role: Role              # Human or Engine
    mark: Cell              # MARK_A (human) or MARK_B (engine)
    name: str               # Display name
    wins: int = 0           # Rounds won in the current match

    def __str__(self) -> str:
        return self.name


def create_players(human_name: str, engine_name: str):
    """
    Create the two players for a new match with zero wins.

    Returns:
        (human, engine) tuple.
    """
    human = Player(role=Role.HUMAN, mark=Cell.MARK_A, name=human_name)
    engine = Player(role=Role.ENGINE, mark=Cell.MARK_B, name=engine_name)
    return human, engine
