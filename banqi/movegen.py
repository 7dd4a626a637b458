"""Legal move generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, overload

from .bitboard import BOARD_MASK, attacks_bb, squares
from .types import (
    REAL_PIECE_TYPE_NB,
    SHOWN_PIECE_TYPE_NB,
    Color,
    Move,
    MoveType,
    PieceType,
)

if TYPE_CHECKING:
    from .position import Position

_MOVERS = (
    PieceType.GENERAL,
    PieceType.ADVISOR,
    PieceType.ELEPHANT,
    PieceType.CHARIOT,
    PieceType.HORSE,
    PieceType.CANNON,
    PieceType.SOLDIER,
)

_REAL_SIDES = (Color.RED, Color.BLACK)


def generate_moves(side: Color, piece_type: PieceType, pos: "Position") -> list[Move]:
    """Moves of `side`'s pieces of one type, or all flips for HIDDEN."""
    if piece_type >= REAL_PIECE_TYPE_NB:
        raise ValueError(f"cannot generate moves for {PieceType(piece_type).name}")
    if piece_type == PieceType.HIDDEN:
        return [Move(sq, sq) for sq in squares(pos.pieces(PieceType.HIDDEN))]
    if side not in _REAL_SIDES:
        raise ValueError(f"cannot generate moves for {Color(side).name}")

    own = pos.pieces_of(side, piece_type)
    if not own:
        return []
    occupied = pos.pieces()
    target = pos.subordinates(side, piece_type) | (~occupied & BOARD_MASK)
    return [
        Move(src, dst)
        for src in squares(own)
        for dst in squares(attacks_bb(piece_type, src, occupied) & target)
    ]


def generate_all(kind: MoveType, side: Color, pos: "Position") -> list[Move]:
    """All moves and/or flips available to `side`."""
    if side not in _REAL_SIDES:
        raise ValueError(f"cannot generate moves for {Color(side).name}")
    moves: list[Move] = []
    if kind & MoveType.MOVING:
        for pt in _MOVERS:
            moves.extend(generate_moves(side, pt, pos))
    if kind & MoveType.FLIPPING:
        moves.extend(generate_moves(side, PieceType.HIDDEN, pos))
    return moves


def generate(
    pos: "Position",
    kind: MoveType = MoveType.ALL,
    side: Color = Color.MYSTERY,
    piece_type: PieceType = PieceType.ALL_PIECES,
) -> list[Move]:
    """Generate moves; MYSTERY means the side to play.

    When a single piece type is given, `kind` is ignored.
    """
    if not (piece_type < SHOWN_PIECE_TYPE_NB or piece_type == PieceType.ALL_PIECES):
        raise ValueError(f"cannot generate moves for {PieceType(piece_type).name}")
    if side == Color.MYSTERY:
        side = pos.due_up()
    if piece_type == PieceType.ALL_PIECES:
        return generate_all(kind, side, pos)
    return generate_moves(side, piece_type, pos)


class MoveList:
    """A list of generated moves for a position."""

    def __init__(
        self,
        pos: "Position",
        kind: MoveType = MoveType.ALL,
        side: Color = Color.MYSTERY,
        piece_type: PieceType = PieceType.ALL_PIECES,
    ) -> None:
        self.kind = kind
        self.side = side
        self._moves = generate(pos, kind, side, piece_type)

    def extend_moves(self, pos: "Position", piece_type: PieceType) -> None:
        """Append more moves generated with this list's kind and side."""
        self._moves.extend(generate(pos, self.kind, self.side, piece_type))

    def deduplicate(self) -> None:
        """Remove repeated moves; the list ends up sorted."""
        self._moves = sorted(set(self._moves))

    def __len__(self) -> int:
        return len(self._moves)

    @overload
    def __getitem__(self, index: int) -> Move: ...

    @overload
    def __getitem__(self, index: slice) -> list[Move]: ...

    def __getitem__(self, index):
        return self._moves[index]

    def __iter__(self) -> Iterator[Move]:
        return iter(self._moves)

    def __repr__(self) -> str:
        return f"MoveList({[str(m) for m in self._moves]!r})"