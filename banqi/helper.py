"""Convenience functions built on positions and move lists."""

from __future__ import annotations

import random
from typing import Callable

from .bitboard import squares
from .movegen import MoveList
from .position import Position
from .types import RNG, Move


def squares_sorted(
    pos: Position, board: int, key: Callable[[int], object] | None = None
) -> list[int]:
    """Set squares of `board`, strongest piece first unless `key` says otherwise."""
    if key is None:

        def key(sq: int) -> int:
            return int(pos.peek_piece_at(sq).type)

    return sorted(squares(board), key=key)


def strategy_random(moves: MoveList, rng: random.Random | None = None) -> Move:
    """Pick a move uniformly at random."""
    rng = RNG if rng is None else rng
    return moves[rng.randrange(len(moves))]