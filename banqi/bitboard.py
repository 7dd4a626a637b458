"""32-square bitboards, attack tables and cannon lookup tables."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator

from .types import (
    DIRECTIONS,
    FILE_NB,
    RANK_NB,
    SQUARE_NB,
    PieceType,
    distance,
    file_of,
    is_okay,
    make_square,
    rank_of,
    square_name,
)

BOARD_MASK = 0xFFFFFFFF

FILE_A_BB = 0x01010101
RANK_1_BB = 0x000000FF


def square_bb(sq: int) -> int:
    if not is_okay(sq):
        raise ValueError(f"square {sq} out of range")
    return 1 << sq


def rank_bb(rank: int) -> int:
    return RANK_1_BB << (FILE_NB * rank)


def file_bb(file: int) -> int:
    return FILE_A_BB << file


def popcount(board: int) -> int:
    return (board & BOARD_MASK).bit_count()


def squares(board: int) -> Iterator[int]:
    """Yield the set squares of a board, lowest first."""
    board &= BOARD_MASK
    while board:
        low = board & -board
        yield low.bit_length() - 1
        board ^= low


def pext(x: int, mask: int) -> int:
    """Gather the bits of `x` selected by `mask` into the low bits."""
    result = 0
    bit = 0
    while mask:
        low = mask & -mask
        if x & low:
            result |= 1 << bit
        bit += 1
        mask ^= low
    return result


def safe_destination(sq: int, step: int) -> int:
    """Bitboard of the square one step away, or 0 if it leaves the board."""
    to = sq + step
    if is_okay(to) and distance(sq, to) <= 2:
        return 1 << to
    return 0


def sliding_attack(sq: int, occupied: int) -> int:
    """Cannon destinations computed by walking each ray.

    The origin bit is toggled on the way out, so it is set in the result.
    """
    if occupied & square_bb(sq):
        raise ValueError(f"origin {square_name(sq)} is occupied")
    attacks = 0
    for d in DIRECTIONS:
        s = sq
        displacement = 0
        last = False
        screen = False
        while not last:
            if not safe_destination(s, d):
                last = True
            bit = 1 << s
            if screen:
                if occupied & bit:
                    attacks |= bit
                    break
            elif occupied & bit:
                screen = True
            elif displacement == 1:
                attacks |= bit
            s += d
            displacement += 1
    return attacks ^ (1 << sq)


@dataclass(frozen=True)
class Magic:
    """Lookup table for one square, indexed by the occupancy of its mask."""

    mask: int
    attacks: tuple[int, ...]

    def index(self, occupied: int) -> int:
        return pext(occupied, self.mask)

    def attacks_bb(self, occupied: int) -> int:
        return self.attacks[self.index(occupied)]


@lru_cache(maxsize=None)
def init_cannon_magics() -> tuple[Magic, ...]:
    """Build the cannon lookup table for every square."""
    magics = []
    for sq in range(SQUARE_NB):
        mask = (rank_bb(rank_of(sq)) | file_bb(file_of(sq))) ^ (1 << sq)
        table = [0] * (1 << popcount(mask))
        b = 0
        while True:
            table[pext(b, mask)] = sliding_attack(sq, b)
            b = (b - mask) & mask
            if not b:
                break
        magics.append(Magic(mask, tuple(table)))
    return tuple(magics)


PSEUDO_ATTACKS: tuple[int, ...] = tuple(
    sum(safe_destination(sq, d) for d in DIRECTIONS) for sq in range(SQUARE_NB)
)

_STEPPERS = frozenset(
    {
        PieceType.GENERAL,
        PieceType.ADVISOR,
        PieceType.ELEPHANT,
        PieceType.CHARIOT,
        PieceType.HORSE,
        PieceType.SOLDIER,
    }
)


def attacks_bb(piece_type: PieceType, sq: int, occupied: int) -> int:
    """All destinations for a face-up piece type from `sq`."""
    if piece_type == PieceType.CANNON:
        return init_cannon_magics()[sq].attacks_bb(occupied)
    if piece_type in _STEPPERS:
        return PSEUDO_ATTACKS[sq]
    return 0


def pretty(board: int) -> str:
    """ASCII drawing of a bitboard."""
    border = "+---+---+---+---+---+---+---+---+\n"
    lines = [border]
    for r in reversed(range(RANK_NB)):
        row = "".join(
            "| X " if board & (1 << make_square(f, r)) else "|   " for f in range(FILE_NB)
        )
        lines.append(f"{row}| {1 + r}\n{border}")
    lines.append("  a   b   c   d   e   f   g   h\n")
    return "".join(lines)