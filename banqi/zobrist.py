"""Zobrist hashing of positions."""

from __future__ import annotations

import random

from .bitboard import squares
from .position import Position
from .types import SQUARE_NB, Color, Move, MoveType, Piece, PieceType

TOTAL_TYPE = 15
HIDDEN_TYPE_INDEX = 14
BLACK_OFFSET = 7
DEFAULT_SEED = 42

_MASK64 = (1 << 64) - 1


def _type_index(piece: Piece) -> int:
    if piece.type == PieceType.HIDDEN:
        return HIDDEN_TYPE_INDEX
    index = int(piece.type)
    if piece.side == Color.BLACK:
        index += BLACK_OFFSET
    return index


class ZobristHash:
    """Random 64-bit keys per (piece kind, square) plus one for the side to move.

    Kinds 0-6 are red pieces, 7-13 black pieces and 14 a face-down piece.
    """

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        rng = random.Random(seed)
        self.keys: tuple[tuple[int, ...], ...] = tuple(
            tuple(rng.getrandbits(64) for _ in range(SQUARE_NB)) for _ in range(TOTAL_TYPE)
        )
        self.side_to_move_key = rng.getrandbits(64)

    def compute(self, pos: Position) -> int:
        """Hash of a position computed from scratch."""
        key = 0
        for sq in squares(pos.pieces()):
            key ^= self.keys[_type_index(pos.peek_piece_at(sq))][sq]
        if pos.due_up() == Color.BLACK:
            key ^= self.side_to_move_key
        return key

    def update(
        self, key: int, mv: Move, pos: Position, flip_piece: Piece | None = None
    ) -> int:
        """Hash after playing `mv` on `pos` (the position before the move).

        For a flip, `flip_piece` is the piece that is revealed.
        """
        key = (key ^ self.side_to_move_key) & _MASK64
        if mv.kind() == MoveType.FLIPPING:
            if flip_piece is None or flip_piece.type in (PieceType.NO_PIECE, PieceType.HIDDEN):
                raise ValueError("a flip needs the face-up piece it reveals")
            sq = mv.src
            key ^= self.keys[HIDDEN_TYPE_INDEX][sq]
            key ^= self.keys[_type_index(flip_piece)][sq]
            return key

        target = pos.peek_piece_at(mv.dst)
        if target.type != PieceType.NO_PIECE:
            key ^= self.keys[_type_index(target)][mv.dst]
        mover_index = _type_index(pos.peek_piece_at(mv.src))
        key ^= self.keys[mover_index][mv.src]
        key ^= self.keys[mover_index][mv.dst]
        return key