"""Board state, move execution and game results."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

from .bitboard import attacks_bb, popcount, square_bb
from .movegen import MoveList
from .types import (
    FILE_NB,
    PIECE_TYPE_NB,
    RANK_NB,
    RNG,
    SHOWN_PIECE_TYPE_NB,
    SIDE_NB,
    SQUARE_NB,
    Color,
    Move,
    MoveType,
    Piece,
    PieceType,
    WinCon,
    can_capture,
    file_of,
    make_square,
    random_faceup_piece,
    split_fen,
)

log = logging.getLogger(__name__)

FIFTY_MOVE_LIMIT = 30

_TEXT_RED = "\033[31m"
_TEXT_RESET = "\033[0m"
_BORDER = " +----+----+----+----+----+----+----+----+\n"

_DEFAULT_SET = (
    (PieceType.GENERAL, 1),
    (PieceType.ADVISOR, 2),
    (PieceType.ELEPHANT, 2),
    (PieceType.CHARIOT, 2),
    (PieceType.HORSE, 2),
    (PieceType.CANNON, 2),
    (PieceType.SOLDIER, 5),
)

_HIDDEN_PIECE = Piece(Color.MYSTERY, PieceType.HIDDEN)


@dataclass(frozen=True)
class _PastMove:
    mv: Move
    piece: Piece
    fmc_old: int


class Position:
    """A Chinese Dark Chess position with its bag of face-down pieces."""

    def __init__(self, fen: str | None = None, rng: random.Random | None = None) -> None:
        self._rng = RNG if rng is None else rng
        self._side = Color.RED
        self._collection: list[Piece] = []
        self._history: list[_PastMove] = []
        self.clear()
        if fen is not None:
            self.read_fen(fen)
            self.clear_collection()
            self.add_collection()

    def clear(self) -> None:
        """Empty the board and reset counters and clocks."""
        self._board = [Piece()] * SQUARE_NB
        self._by_type = [0] * PIECE_TYPE_NB
        self._by_color = [0] * SIDE_NB
        self.fifty_move_count = 0
        self.illegal = Color.NO_COLOR
        self.time_remaining = (0.0, 0.0)

    def copy(self) -> "Position":
        other = Position.__new__(Position)
        other._rng = self._rng
        other._side = self._side
        other._collection = list(self._collection)
        other._history = list(self._history)
        other._board = list(self._board)
        other._by_type = list(self._by_type)
        other._by_color = list(self._by_color)
        other.fifty_move_count = self.fifty_move_count
        other.illegal = self.illegal
        other.time_remaining = self.time_remaining
        return other

    __copy__ = copy

    # -- the bag of face-down pieces --

    def add_collection(self, pieces=None) -> None:
        """Add pieces to the bag; None adds the standard set for both sides."""
        if pieces is None:
            for side in (Color.RED, Color.BLACK):
                for pt, n in _DEFAULT_SET:
                    self._collection.extend([Piece(side, pt)] * n)
            return
        self._collection.extend(pieces)

    def clear_collection(self) -> None:
        self._collection.clear()

    def get_collection(self) -> list[Piece]:
        return list(self._collection)

    def _sample_remove(self) -> Piece:
        n = self._rng.randrange(len(self._collection))
        thing = self._collection[n]
        last = self._collection.pop()
        if n < len(self._collection):
            self._collection[n] = last
        return thing

    # -- FEN --

    def read_fen(self, fen: str) -> None:
        """Place pieces, side to move and clocks from a FEN-like string."""
        sq = 0
        for i, token in enumerate(split_fen(fen)):
            if i < RANK_NB:
                for c in token:
                    try:
                        piece = Piece.from_char(c)
                    except ValueError:
                        empty = ord(c) - ord("0")
                        if not 1 <= empty <= FILE_NB:
                            raise ValueError(f"invalid FEN character {c!r}") from None
                        sq += empty
                        continue
                    if sq >= SQUARE_NB:
                        raise ValueError(f"FEN {fen!r} has too many squares")
                    self.place_piece_at(piece, sq)
                    sq += 1
            elif i == 4:
                self._side = Color.BLACK if token == "b" else Color.RED
            elif i in (5, 6):
                try:
                    value = float(token)
                except ValueError:
                    log.warning("failed to parse time %r", token)
                    continue
                red, black = self.time_remaining
                self.time_remaining = (value, black) if i == 5 else (red, value)

    def to_fen(self) -> str:
        parts: list[str] = []
        empty = 0
        for sq, piece in enumerate(self._board):
            present = piece.type != PieceType.NO_PIECE
            if not present:
                empty += 1
            if present or file_of(sq) == FILE_NB - 1:
                if empty:
                    parts.append(str(empty))
                empty = 0
                if present:
                    parts.append(piece.char())
            if file_of(sq) == FILE_NB - 1 and sq != SQUARE_NB - 1:
                parts.append("/")
        parts.append(" b" if self._side == Color.BLACK else " r")
        return "".join(parts)

    def setup(self, hidden: bool = True) -> None:
        """Fill every square with a face-down piece; flip them all unless hidden."""
        for sq in range(SQUARE_NB):
            self.place_piece_at(_HIDDEN_PIECE, sq)
        if not hidden:
            for sq in range(SQUARE_NB):
                self.flip_piece_at(sq)

    # -- game state --

    def outcome(self) -> tuple[Color, WinCon | None]:
        """The winner (MYSTERY for a draw, NO_COLOR if undecided) and how."""
        if self.fifty_move_count >= FIFTY_MOVE_LIMIT:
            return Color.MYSTERY, WinCon.FIFTY_MOVES
        for side in (Color.BLACK, Color.RED):
            if len(MoveList(self, MoveType.ALL, side)) == 0:
                how = WinCon.DEAD_POSITION if self.count(side) > 0 else WinCon.ELIMINATION
                return side.opponent(), how
        if self.illegal != Color.NO_COLOR:
            return self.illegal.opponent(), WinCon.ILLEGAL_MOVE
        return Color.NO_COLOR, None

    def winner(self) -> Color:
        return self.outcome()[0]

    def due_up(self) -> Color:
        return self._side

    def time_left(self, color: Color = Color.MYSTERY) -> float:
        """Remaining seconds for `color`, by default the side to play."""
        if color not in (Color.RED, Color.BLACK):
            color = self._side
        return self.time_remaining[0] if color == Color.RED else self.time_remaining[1]

    # -- bitboards --

    def pieces(self, *args: PieceType) -> int:
        """Squares holding any of the given types (all pieces by default)."""
        if not args:
            args = (PieceType.ALL_PIECES,)
        board = 0
        for pt in args:
            if not 0 <= pt < PIECE_TYPE_NB:
                raise ValueError(f"bad piece type {pt}")
            board |= self._by_type[pt]
        return board

    def pieces_of(self, color: Color, *args: PieceType) -> int:
        """Squares holding `color`'s pieces of any of the given types."""
        if color not in (Color.RED, Color.BLACK):
            raise ValueError(f"{Color(color).name} has no pieces of its own")
        if not args:
            return self._by_color[color]
        return self._by_color[color] & self.pieces(*args)

    def count(self, color=None, piece_type: PieceType = PieceType.ALL_PIECES) -> int:
        """Number of pieces of a type, for one side or for both."""
        if isinstance(color, PieceType):
            color, piece_type = None, color
        if not 0 <= piece_type < PIECE_TYPE_NB:
            raise ValueError(f"bad piece type {piece_type}")
        if color in (Color.RED, Color.BLACK):
            return popcount(self._by_color[color] & self._by_type[piece_type])
        return popcount(self._by_type[piece_type])

    def subordinates(self, color: Color, piece_type: PieceType) -> int:
        """Enemy pieces that a `piece_type` of `color` outranks."""
        enemy = color.opponent()
        board = 0
        for target in map(PieceType, range(SHOWN_PIECE_TYPE_NB)):
            if can_capture(piece_type, target):
                board |= self.pieces_of(enemy, target)
        return board

    # -- piece manipulation --

    def place_piece_at(self, piece: Piece, sq: int) -> None:
        """Put a piece on a square, replacing whatever is there."""
        bit = square_bb(sq)
        if self._board[sq].side != Color.NO_COLOR:
            self.remove_piece_at(sq)
        if piece.type == PieceType.NO_PIECE:
            return
        self._board[sq] = piece
        self._by_type[piece.type] |= bit
        self._by_type[PieceType.ALL_PIECES] |= bit
        if piece.side < SIDE_NB:
            self._by_type[PieceType.FACE_UP] |= bit
            self._by_color[piece.side] |= bit

    def remove_piece_at(self, sq: int) -> Piece:
        """Take the piece off a square and return it."""
        bit = square_bb(sq)
        piece = self._board[sq]
        if piece.type == PieceType.NO_PIECE:
            return piece
        self._board[sq] = Piece()
        self._by_type[piece.type] ^= bit
        self._by_type[PieceType.ALL_PIECES] ^= bit
        if piece.side < SIDE_NB:
            self._by_type[PieceType.FACE_UP] ^= bit
            self._by_color[piece.side] ^= bit
        return piece

    def move_piece(self, src: int, dst: int) -> None:
        removed = self.remove_piece_at(src)
        if removed.type == PieceType.NO_PIECE:
            log.warning("move_piece: moved nothing")
            return
        self.place_piece_at(removed, dst)

    def peek_piece_at(self, sq: int) -> Piece:
        return self._board[sq]

    def flip_piece_at(self, sq: int) -> bool:
        """Reveal a face-down piece, drawing from the bag or at random."""
        if self._board[sq].side != Color.MYSTERY:
            return False
        if self._collection:
            piece = self._sample_remove()
        else:
            piece = random_faceup_piece(self._rng)
        self.place_piece_at(piece, sq)
        return True

    # -- moves --

    def do_move(self, mv: Move) -> bool:
        """Play a move or flip; returns whether it was carried out."""
        if mv.kind() == MoveType.FLIPPING:
            sq = mv.src
            if not self.flip_piece_at(sq):
                return False
            first_flip = popcount(self.pieces(PieceType.HIDDEN)) == SQUARE_NB - 1
            flipped_black = bool(self.pieces_of(Color.BLACK) & square_bb(sq))
            if not first_flip or not flipped_black:
                self._side = self._side.opponent()
            self._history.append(_PastMove(mv, self._board[sq], self.fifty_move_count))
            return True

        src = self._board[mv.src]
        dst = self._board[mv.dst]
        if src.side != self._side or src.type > PieceType.SOLDIER:
            self.illegal = self._side
            return False
        valid = attacks_bb(src.type, mv.src, self._by_type[PieceType.ALL_PIECES])
        if not valid & square_bb(mv.dst) or not can_capture(src.type, dst.type):
            self.illegal = self._side
            return False

        self.move_piece(mv.src, mv.dst)
        self._history.append(_PastMove(mv, dst, self.fifty_move_count))
        self._side = self._side.opponent()
        self.fifty_move_count = (
            self.fifty_move_count + 1 if dst.type == PieceType.NO_PIECE else 0
        )
        return True

    def undo_move(self) -> bool:
        """Take back the last successful move; clocks are not restored."""
        if not self._history:
            return False
        past = self._history[-1]
        if past.mv.kind() == MoveType.MOVING:
            self.move_piece(past.mv.dst, past.mv.src)
            self.fifty_move_count = past.fmc_old
            if past.piece.type != PieceType.NO_PIECE:
                self.place_piece_at(past.piece, past.mv.dst)
        else:
            if past.piece.type == PieceType.NO_PIECE:
                log.error("undo_move: flipped piece has no type")
                return False
            self.place_piece_at(_HIDDEN_PIECE, past.mv.src)
            self.fifty_move_count = past.fmc_old
            self._collection.append(past.piece)
        self._history.pop()
        self._side = self._side.opponent()
        return True

    def simulate(self, strategy: Callable[[MoveList], Move]) -> int:
        """Play a copy to the end: 1 if the side to play wins, 0 draw, -1 loss."""
        game = self.copy()
        while game.winner() == Color.NO_COLOR:
            game.do_move(strategy(MoveList(game)))
        result = game.winner()
        if result == self._side:
            return 1
        if result == Color.MYSTERY:
            return 0
        return -1

    def render(self) -> str:
        """Coloured drawing of the board for a terminal."""
        out = ["\n", _BORDER]
        for r in reversed(range(RANK_NB)):
            for f in range(FILE_NB):
                piece = self._board[make_square(f, r)]
                if piece.side == Color.RED:
                    out.append(f" | {_TEXT_RED}{piece.wide()}{_TEXT_RESET}")
                else:
                    out.append(f" | {piece.wide()}")
            out.append(f" | {1 + r}\n{_BORDER}")
        out.append("    a    b    c    d    e    f    g    h\n")
        out.append("-> Black to play\n" if self._side == Color.BLACK else "-> Red to play\n")
        return "".join(out)

    def __str__(self) -> str:
        return self.render()