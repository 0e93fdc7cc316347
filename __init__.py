"""
TicTacToe Match Project
=======================
A best-of-five TicTacToe match between you and the computer.
The computer picks its moves with a depth-limited Minimax search over a
positional line heuristic, and the first player to 3 round wins takes the match.

Cells are numbered 0-8 internally (row-major), 1-9 on the console.
"""

__version__ = "1.0.0"
