"""Core value types for Chinese Dark Chess: colors, pieces, squares and moves."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from enum import IntEnum, IntFlag

SQUARE_NB = 32
FILE_NB = 8
RANK_NB = 4
SIDE_NB = 2
MOVABLE_PIECE_TYPE_NB = 7
SHOWN_PIECE_TYPE_NB = 8
REAL_PIECE_TYPE_NB = 9
PIECE_TYPE_NB = 12

NORTH = 8
SOUTH = -8
EAST = 1
WEST = -1
DIRECTIONS = (NORTH, SOUTH, EAST, WEST)

RNG = random.Random()


class Color(IntEnum):
    """Side of a piece. Only BLACK and RED are real sides."""

    BLACK = 0
    RED = 1
    MYSTERY = 2
    NO_COLOR = 3

    def opponent(self) -> "Color":
        """Return the other side; only defined for RED and BLACK."""
        if self not in (Color.BLACK, Color.RED):
            raise ValueError(f"{self.name} has no opponent")
        return Color(self ^ 1)


class PieceType(IntEnum):
    """Piece types, strongest first."""

    GENERAL = 0
    ADVISOR = 1
    ELEPHANT = 2
    CHARIOT = 3
    HORSE = 4
    CANNON = 5
    SOLDIER = 6
    DUCK = 7
    HIDDEN = 8
    NO_PIECE = 9
    ALL_PIECES = 10
    FACE_UP = 11


class MoveType(IntFlag):
    MOVING = 1
    FLIPPING = 2
    ALL = 3


class WinCon(IntEnum):
    """How a game ended."""

    ELIMINATION = 0
    DEAD_POSITION = 1
    ILLEGAL_MOVE = 2
    FIFTY_MOVES = 3
    INSUFFICIENT_MATERIAL = 4
    THREEFOLD = 5

    def describe(self) -> str:
        return _WINCON_TEXT[self]


_WINCON_TEXT = {
    WinCon.ELIMINATION: "All pieces eliminated.",
    WinCon.DEAD_POSITION: "Stalemate.",
    WinCon.ILLEGAL_MOVE: "Illegal move.",
    WinCon.FIFTY_MOVES: "30 moves without captures.",
    WinCon.INSUFFICIENT_MATERIAL: "Insufficient material.",
    WinCon.THREEFOLD: "Threefold repetition.",
}

_PIECE_CHARS = {
    Color.BLACK: "KAERNCPD?",
    Color.RED: "kaerncpd?",
}

_PIECE_WIDE = {
    Color.BLACK: ("Ｋ", "Ａ", "Ｅ", "Ｒ", "Ｎ", "Ｃ", "Ｐ", "🦆", "??"),
    Color.RED: ("ｋ", "ａ", "ｅ", "ｒ", "ｎ", "ｃ", "ｐ", "🦆", "??"),
}


@dataclass(frozen=True, order=True)
class Piece:
    """A piece: its side and type. The default is an empty square."""

    side: Color = Color.NO_COLOR
    type: PieceType = PieceType.NO_PIECE

    def char(self) -> str:
        """Single-character FEN symbol; '?' for hidden, ' ' for empty."""
        if self.type == PieceType.NO_PIECE:
            return " "
        if self.type == PieceType.HIDDEN or self.side not in _PIECE_CHARS:
            return "?"
        return _PIECE_CHARS[self.side][self.type]

    def wide(self) -> str:
        """Two-column display symbol."""
        if self.type == PieceType.NO_PIECE:
            return "  "
        if self.type == PieceType.HIDDEN or self.side not in _PIECE_WIDE:
            return "??"
        return _PIECE_WIDE[self.side][self.type]

    @classmethod
    def from_char(cls, char: str) -> "Piece":
        try:
            return _CHAR_TO_PIECE[char]
        except KeyError:
            raise ValueError(f"unknown piece symbol {char!r}") from None

    def __str__(self) -> str:
        return self.wide()


_CHAR_TO_PIECE = {"?": Piece(Color.MYSTERY, PieceType.HIDDEN)}
for _side, _chars in _PIECE_CHARS.items():
    for _pt, _c in zip(PieceType, _chars[:SHOWN_PIECE_TYPE_NB]):
        _CHAR_TO_PIECE[_c] = Piece(_side, _pt)


def rank_of(sq: int) -> int:
    return sq // FILE_NB


def file_of(sq: int) -> int:
    return sq % FILE_NB


def make_square(file: int, rank: int) -> int:
    return rank * FILE_NB + file


def is_okay(sq: int) -> bool:
    return 0 <= sq < SQUARE_NB


def square_name(sq: int) -> str:
    """Name of a square such as 'A1'."""
    return f"{chr(ord('A') + file_of(sq))}{1 + rank_of(sq)}"


def parse_square(text: str) -> int:
    """Parse a square name such as 'D2'."""
    if len(text) != 2:
        raise ValueError(f"bad square {text!r}")
    file = ord(text[0]) - ord("A")
    rank = ord(text[1]) - ord("1")
    if not (0 <= file < FILE_NB and 0 <= rank < RANK_NB):
        raise ValueError(f"bad square {text!r}")
    return make_square(file, rank)


def distance(a: int, b: int) -> int:
    """Manhattan distance between two squares."""
    return abs(rank_of(a) - rank_of(b)) + abs(file_of(a) - file_of(b))


def can_capture(attacker: PieceType, victim: PieceType) -> bool:
    """Whether a piece of type `attacker` may take one of type `victim`."""
    if victim in (PieceType.DUCK, PieceType.HIDDEN):
        return False
    if attacker == PieceType.GENERAL and victim == PieceType.SOLDIER:
        return False
    if attacker == PieceType.SOLDIER and victim == PieceType.GENERAL:
        return True
    if attacker == PieceType.CANNON:
        return True
    return attacker <= victim


@dataclass(frozen=True, order=True)
class Move:
    """A move from `src` to `dst`; equal squares mean a flip."""

    src: int
    dst: int

    def kind(self) -> MoveType:
        return MoveType.FLIPPING if self.src == self.dst else MoveType.MOVING

    @classmethod
    def parse(cls, text: str) -> "Move":
        """Parse 'FLIP <sq>' or 'MOVE <from> <to>'."""
        tokens = text.split()
        if not tokens:
            raise ValueError("empty move")
        cmd = tokens[0]
        if cmd == "FLIP" and len(tokens) >= 2:
            sq = parse_square(tokens[1])
            return cls(sq, sq)
        if cmd == "MOVE" and len(tokens) >= 3:
            return cls(parse_square(tokens[1]), parse_square(tokens[2]))
        raise ValueError(f"bad move {text!r}")

    def __str__(self) -> str:
        if self.kind() == MoveType.FLIPPING:
            return f"FLIP {square_name(self.src)}"
        return f"MOVE {square_name(self.src)} {square_name(self.dst)}"


_FEN_SPLIT = re.compile(r"[/\s]+")


def split_fen(fen: str) -> list[str]:
    """Split a FEN-like string on slashes and whitespace."""
    if not fen:
        return []
    tokens = _FEN_SPLIT.split(fen)
    if tokens and tokens[-1] == "":
        tokens.pop()
    return tokens


def random_faceup_piece(rng: random.Random | None = None) -> Piece:
    """A random movable face-up piece of either side."""
    rng = rng or RNG
    return Piece(Color(rng.randrange(SIDE_NB)), PieceType(rng.randrange(MOVABLE_PIECE_TYPE_NB)))