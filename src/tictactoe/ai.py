"""Exhaustive minimax search for picking the automated player's move."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .board import (
    EMPTY,
    O,
    PLAYERS,
    X,
    Player,
    has_won,
    is_full,
    legal_moves,
    opponent,
)

if TYPE_CHECKING:
    from .game import TicTacToeGame

logger = logging.getLogger(__name__)

# Fixed terminal scores; X minimizes, O maximizes.
X_WIN_SCORE = -10
O_WIN_SCORE = 10
TIE_SCORE = 0

CacheKey = Tuple[Tuple[str, ...], Player]


@dataclass(frozen=True)
class Move:
    """A candidate cell and the score reached by playing there optimally.

    ``index`` is None for terminal evaluations, which have no move to make.
    """

    index: Optional[int]
    score: int


def evaluate(board: Sequence[str]) -> Optional[int]:
    """Score a terminal board, or return None if play continues.

    The checks run in a fixed order: X win, O win, full board.
    """
    if has_won(board, X):
        return X_WIN_SCORE
    if has_won(board, O):
        return O_WIN_SCORE
    if is_full(board):
        return TIE_SCORE
    return None


def best_move(
    board: Sequence[str],
    player: Player,
    cache: Optional[Dict[CacheKey, Move]] = None,
) -> Move:
    """Return the optimal move for ``player`` on a non-terminal ``board``.

    Candidates are tried in ascending index order and the first one with the
    best score wins ties, so the result is deterministic. ``board`` is never
    modified. ``cache`` memoizes positions across calls without changing the
    chosen move.
    """
    if player not in PLAYERS:
        raise ValueError(f"Unknown player {player!r}")
    if evaluate(board) is not None:
        raise ValueError("Cannot search a finished board")

    scratch = list(board)
    move = _minimax(scratch, player, cache)
    logger.debug("best move for %s: index=%s score=%s", player, move.index, move.score)
    return move


def _minimax(
    board: List[str], player: Player, cache: Optional[Dict[CacheKey, Move]]
) -> Move:
    score = evaluate(board)
    if score is not None:
        return Move(index=None, score=score)

    key: Optional[CacheKey] = None
    if cache is not None:
        key = (tuple(board), player)
        hit = cache.get(key)
        if hit is not None:
            return hit

    other = opponent(player)
    moves: List[Move] = []
    for index in legal_moves(board):
        board[index] = player
        result = _minimax(board, other, cache)
        board[index] = EMPTY
        moves.append(Move(index=index, score=result.score))

    best = moves[0]
    for move in moves[1:]:
        if player == O and move.score > best.score:
            best = move
        elif player == X and move.score < best.score:
            best = move

    if key is not None:
        cache[key] = best
    return best


@dataclass
class MinimaxAI:
    """Automated player that drives a game session through ``best_move``.

    Positions are cached per instance, so repeated games reuse earlier searches.
    """

    player: Player = O
    _cache: Dict[CacheKey, Move] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.player not in PLAYERS:
            raise ValueError(f"Unknown player {self.player!r}")

    def choose(self, game: "TicTacToeGame") -> int:
        if game.is_over:
            raise ValueError("Game already finished")
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        move = best_move(game.board, self.player, self._cache)
        if move.index is None:
            raise RuntimeError("No valid moves available")
        return move.index
