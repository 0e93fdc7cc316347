"""
Match configuration for TicTacToe.
All the settings for a best-of-five match against the computer.

Environment overrides (read by MatchConfig.from_env):
    TICTACTOE_SEARCH_DEPTH=1..9
    TICTACTOE_LOG_LEVEL=DEBUG|INFO|WARNING
"""

import logging
import os

from engine.board import BOARD_SIZE

logger = logging.getLogger(__name__)


class MatchConfig:
    """
    Configuration class for match settings.
    Change these values to tune the game!
    """

    # ==================== MATCH SETTINGS ====================
    # Round wins needed to take the match (first to 3 = best of five)
    WIN_THRESHOLD = 3

    # ==================== ENGINE SETTINGS ====================
    # Plies the computer looks ahead. 1 is quick and beatable,
    # 9 searches the whole game tree.
    SEARCH_DEPTH = 1

    # Pretend-thinking delay before the computer's move (milliseconds)
    THINK_DELAY_MS = (500, 1500)

    # ==================== STARTER DICE ====================
    # Both sides roll 1..DICE_FACES, highest roll starts every round
    DICE_FACES = 5
    # Give up (RandomnessUnavailable) after this many tied rolls in a row
    MAX_DICE_REROLLS = 100

    # ==================== PLAYER NAMES ====================
    HUMAN_NAME = "You"
    ENGINE_NAMES = [
        "Leanne", "Ervin", "Clementine", "Patricia", "Chelsey", "Dennis", "Kurtis",
        "Nicholas", "Alphonse", "Marie", "Edouard", "Lucille", "Julie", "Bernard",
    ]

    # ==================== DEBUG SETTINGS ====================
    LOG_LEVEL = "WARNING"

    @classmethod
    def from_env(cls, environ=None) -> "MatchConfig":
        """
        Build a config with environment overrides applied.

        Malformed values are logged and ignored.
        """
        environ = os.environ if environ is None else environ
        config = cls()

        depth = environ.get("TICTACTOE_SEARCH_DEPTH")
        if depth:
            try:
                value = int(depth)
                if not 1 <= value <= BOARD_SIZE:
                    raise ValueError(f"must be 1-{BOARD_SIZE}")
                config.SEARCH_DEPTH = value
            except ValueError as e:
                logger.warning("Ignoring TICTACTOE_SEARCH_DEPTH=%r: %s", depth, e)

        level = environ.get("TICTACTOE_LOG_LEVEL")
        if level:
            if isinstance(logging.getLevelName(level.upper()), int):
                config.LOG_LEVEL = level.upper()
            else:
                logger.warning("Ignoring TICTACTOE_LOG_LEVEL=%r: unknown level", level)

        return config
