"""Game session rules: turn order, move application and result tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .board import (
    BOARD_SIZE,
    EMPTY,
    X,
    Player,
    is_full,
    legal_moves,
    new_board,
    opponent,
    winning_line,
)


@dataclass
class TicTacToeGame:
    board: List[str] = field(default_factory=new_board)
    current_player: Player = X
    winner: Optional[Player] = None
    drawn: bool = False
    # Cells of the line that decided the game, for highlighting
    winning_line: Optional[Tuple[int, int, int]] = None

    @property
    def is_over(self) -> bool:
        return self.winner is not None or self.drawn

    def available_moves(self) -> List[int]:
        if self.is_over:
            return []
        return legal_moves(self.board)

    def play_move(self, index: int) -> None:
        """Place the current player's mark, update the result and pass the turn."""
        if self.is_over:
            raise ValueError("Game already finished")
        if not 0 <= index < BOARD_SIZE:
            raise ValueError(f"Cell index {index} is off the board")
        if self.board[index] != EMPTY:
            raise ValueError("Cell already occupied")

        self.board[index] = self.current_player
        self._update_state()
        if not self.is_over:
            self.current_player = opponent(self.current_player)

    def reset(self) -> None:
        """Clear the board; X always moves first."""
        self.board = new_board()
        self.current_player = X
        self.winner = None
        self.drawn = False
        self.winning_line = None

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            board=self.board.copy(),
            current_player=self.current_player,
            winner=self.winner,
            drawn=self.drawn,
            winning_line=self.winning_line,
        )

    # ---- helpers ----

    def _update_state(self) -> None:
        line = winning_line(self.board)
        if line is not None:
            self.winner = self.board[line[0]]
            self.winning_line = line
            self.drawn = False
            return
        if is_full(self.board):
            self.winner = None
            self.drawn = True
