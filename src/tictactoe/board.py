"""Board state for 3x3 tic-tac-toe: cells, winning lines and result detection."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"

X: Player = "X"
O: Player = "O"
EMPTY = ""
PLAYERS: Tuple[Player, ...] = (X, O)

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

BOARD_SIZE = 9


def new_board() -> List[str]:
    return [EMPTY] * BOARD_SIZE


def opponent(player: Player) -> Player:
    if player == X:
        return O
    if player == O:
        return X
    raise ValueError(f"Unknown player {player!r}")


def legal_moves(board: Sequence[str]) -> List[int]:
    """Indices of empty cells, ascending."""
    return [i for i, c in enumerate(board) if c == EMPTY]


def has_won(board: Sequence[str], player: Player) -> bool:
    return any(
        board[a] == player and board[b] == player and board[c] == player
        for a, b, c in WINNING_LINES
    )


def is_full(board: Sequence[str]) -> bool:
    return all(c != EMPTY for c in board)


def winning_line(board: Sequence[str]) -> Optional[Tuple[int, int, int]]:
    """First line in ``WINNING_LINES`` order held entirely by one mark."""
    for line in WINNING_LINES:
        a, b, c = line
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return line
    return None


def winner(board: Sequence[str]) -> Optional[Player]:
    line = winning_line(board)
    return board[line[0]] if line else None


def is_terminal(board: Sequence[str]) -> bool:
    return winning_line(board) is not None or is_full(board)


def validate_board(board: Sequence[str]) -> List[str]:
    """Return a list copy of ``board`` after checking its shape and marks.

    Only the API boundary needs this; the search helpers trust their input.
    """
    cells = list(board)
    if len(cells) != BOARD_SIZE:
        raise ValueError(f"Board must have {BOARD_SIZE} cells, got {len(cells)}")
    for i, c in enumerate(cells):
        if c not in (EMPTY, X, O):
            raise ValueError(f"Cell {i} holds unknown mark {c!r}")
    return cells
