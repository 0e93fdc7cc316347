"""
Session module for TicTacToe.
Runs a best-of-five match between a human and the search engine.
"""

from .config import MatchConfig
from .controller import MatchController, MatchPhase, MatchSession, MoveRecord, RoundRecord
from .listener import MatchListener
from .move_sources import EngineMoveSource, HumanMoveSource, MoveSource
from .players import Player, Role, create_players
