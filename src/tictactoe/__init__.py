"""Tic-tac-toe package exposing board rules, the minimax engine, and the web application."""

from .ai import MinimaxAI, Move, best_move, evaluate
from .board import WINNING_LINES, has_won, is_full, legal_moves
from .game import TicTacToeGame
from .ui import app

__all__ = [
    "MinimaxAI",
    "Move",
    "TicTacToeGame",
    "WINNING_LINES",
    "app",
    "best_move",
    "evaluate",
    "has_won",
    "is_full",
    "legal_moves",
]
