"""
Console front end for TicTacToe.

This script ties together:
- Engine (board, evaluation, minimax search)
- Session (players, dice, rounds, match score)
- Console input/output (board rendering, messages, typed moves)

Run this script to play a best-of-five match against the computer!
"""

import logging
from typing import Optional, Tuple

from engine.board import Board, Cell
from engine.random_source import RandomSource
from session.config import MatchConfig
from session.controller import MatchController
from session.listener import MatchListener
from session.move_sources import HumanMoveSource
from session.players import Player, Role

# How long the input loop waits for a move request before re-checking the match
POLL_INTERVAL_S = 0.1


class ConsoleListener(MatchListener):
    """Prints the board and match messages to the console."""

    def __init__(self, board_getter):
        self._board = board_getter
        self._opponent = "AI"

    def opponent_named(self, player: Player) -> None:
        self._opponent = player.name
        print(f"You are playing against {player.name}")

    def starter_decided(self, starter: Player, human_roll: int, engine_roll: int) -> None:
        print("The dice are rolling!")
        print(f"You: {human_roll} - {self._opponent}: {engine_roll}.")
        print(f"{starter.name} start!")

    def turn_started(self, player: Player) -> None:
        if player.role == Role.HUMAN:
            print("\nYour turn!")
        else:
            print(f"\n{player.name}'s turn")

    def cell_marked(self, index: int, mark: Cell) -> None:
        print(f"\n{'X' if mark == Cell.MARK_A else 'O'} -> cell {index + 1}")
        print(self._board().render())

    def board_cleared(self) -> None:
        print("\n" + "=" * 40)
        print("   New round")
        print("=" * 40)

    def move_rejected(self, player: Player, index, reason: str) -> None:
        print(f"Move {index!r} rejected: {reason}")

    def turn_winner(self, player: Player, line: Optional[Tuple[int, int, int]]) -> None:
        cells = ", ".join(str(i + 1) for i in line) if line else "?"
        print(f"\n{player.name} win! (cells {cells})")

    def draw(self) -> None:
        print("\nDraw!")

    def match_winner(self, player: Player) -> None:
        print("\n" + "=" * 40)
        print(f"   {player.name} wins the game!")
        print("=" * 40)


class TicTacToeConsole:
    """
    Main controller for the console game.

    Game flow:
    1. Roll the dice to see who starts
    2. Type a cell number (1-9) when it's your turn
    3. The computer thinks for a moment and answers
    4. First to 3 round wins takes the match
    """

    def __init__(self, config: Optional[MatchConfig] = None, seed: Optional[int] = None):
        self.config = config or MatchConfig.from_env()
        self.human_source = HumanMoveSource()
        self.controller = MatchController(
            human_source=self.human_source,
            listener=ConsoleListener(self._current_board),
            config=self.config,
            rng=RandomSource(seed),
        )
        self.is_running = False

    def _current_board(self) -> Board:
        return self.controller.session.board

    def start(self):
        """Start playing matches until the user quits."""
        print("\n" + "=" * 40)
        print("   Tic Tac Toe")
        print("=" * 40)
        print("Cells are numbered 1-9, left to right, top to bottom.")
        print("Type 'q' to quit, 'r' to restart the match.\n")

        self.is_running = True
        self.controller.play()
        try:
            self._game_loop()
        finally:
            self.controller.cancel()

    def _game_loop(self):
        """Main input loop."""
        while self.is_running:
            self.controller.raise_if_failed()

            if self.controller.is_match_over:
                answer = input("\nTry again? [y/N] ").strip().lower()
                if answer == "y":
                    self.controller.play()
                    continue
                self.is_running = False
                break

            if not self.human_source.wait_for_request(POLL_INTERVAL_S):
                continue

            self._handle_input(input("> ").strip().lower())

    def _handle_input(self, text: str):
        """Turn one line of input into a move or a command."""
        if text == "q":
            print("\nGame quit by user.")
            self.is_running = False
        elif text == "r":
            print("\nRestarting match...")
            self.controller.play()
        elif text.isdigit() and self.controller.submit(int(text) - 1):
            return
        else:
            print("Pick an empty cell between 1 and 9.")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="TicTacToe against the computer")
    parser.add_argument(
        "--depth",
        type=int,
        help="Search depth of the computer, 1-9 (default: 1)"
    )
    parser.add_argument(
        "--fast",
        action="store_true",
        help="Skip the computer's thinking delay"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed the random source for a reproducible match"
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: from TICTACTOE_LOG_LEVEL or WARNING)"
    )

    args = parser.parse_args()

    config = MatchConfig.from_env()
    if args.depth is not None:
        if not 1 <= args.depth <= 9:
            parser.error("--depth must be between 1 and 9")
        config.SEARCH_DEPTH = args.depth
    if args.fast:
        config.THINK_DELAY_MS = None
    if args.log_level:
        config.LOG_LEVEL = args.log_level.upper()

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    game = TicTacToeConsole(config=config, seed=args.seed)

    try:
        game.start()
    except KeyboardInterrupt:
        print("\n\nGame interrupted by user.")
    finally:
        print("Goodbye!")


if __name__ == "__main__":
    main()
