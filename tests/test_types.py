import random

import pytest

from banqi.types import (
    SQUARE_NB,
    Color,
    Move,
    MoveType,
    Piece,
    PieceType,
    WinCon,
    can_capture,
    distance,
    file_of,
    make_square,
    parse_square,
    random_faceup_piece,
    rank_of,
    split_fen,
    square_name,
)


def test_opponent_swaps_sides():
    assert Color.RED.opponent() == Color.BLACK
    assert Color.BLACK.opponent() == Color.RED


@pytest.mark.parametrize("color", [Color.MYSTERY, Color.NO_COLOR])
def test_opponent_undefined(color):
    with pytest.raises(ValueError):
        color.opponent()


def test_square_names_round_trip():
    for sq in range(SQUARE_NB):
        assert parse_square(square_name(sq)) == sq
    assert square_name(0) == "A1"


def test_make_square_inverse():
    for sq in range(SQUARE_NB):
        assert make_square(file_of(sq), rank_of(sq)) == sq


@pytest.mark.parametrize("text", ["", "A", "A10", "I1", "A5", "a1", "A0"])
def test_parse_square_rejects(text):
    with pytest.raises(ValueError):
        parse_square(text)


def test_distance_is_manhattan_and_symmetric():
    for a in range(SQUARE_NB):
        assert distance(a, a) == 0
        for b in range(SQUARE_NB):
            assert distance(a, b) == distance(b, a)
    assert distance(make_square(0, 0), make_square(7, 3)) == 10


def test_capture_rules():
    assert not can_capture(PieceType.GENERAL, PieceType.SOLDIER)
    assert can_capture(PieceType.SOLDIER, PieceType.GENERAL)
    assert can_capture(PieceType.SOLDIER, PieceType.SOLDIER)
    assert not can_capture(PieceType.SOLDIER, PieceType.HORSE)
    assert can_capture(PieceType.CANNON, PieceType.GENERAL)
    assert not can_capture(PieceType.CANNON, PieceType.DUCK)
    assert not can_capture(PieceType.GENERAL, PieceType.HIDDEN)
    assert can_capture(PieceType.CHARIOT, PieceType.HORSE)
    assert not can_capture(PieceType.HORSE, PieceType.CHARIOT)
    assert can_capture(PieceType.HORSE, PieceType.NO_PIECE)


def test_piece_chars_round_trip():
    for side in (Color.BLACK, Color.RED):
        for pt in list(PieceType)[:8]:
            piece = Piece(side, pt)
            assert Piece.from_char(piece.char()) == piece


def test_piece_char_case_by_side():
    assert Piece(Color.BLACK, PieceType.GENERAL).char() == "K"
    assert Piece(Color.RED, PieceType.GENERAL).char() == "k"
    assert Piece.from_char("?") == Piece(Color.MYSTERY, PieceType.HIDDEN)
    assert Piece(Color.MYSTERY, PieceType.HIDDEN).wide() == "??"


def test_piece_from_char_unknown():
    with pytest.raises(ValueError):
        Piece.from_char("x")


def test_default_piece_is_empty():
    piece = Piece()
    assert piece.type == PieceType.NO_PIECE
    assert piece.side == Color.NO_COLOR


def test_move_format_and_parse():
    flip = Move(0, 0)
    assert flip.kind() == MoveType.FLIPPING
    assert str(flip) == "FLIP A1"
    move = Move(parse_square("A1"), parse_square("B1"))
    assert move.kind() == MoveType.MOVING
    assert str(move) == "MOVE A1 B1"
    for mv in (flip, move, Move(31, 23)):
        assert Move.parse(str(mv)) == mv


@pytest.mark.parametrize("text", ["", "JUMP A1", "FLIP", "MOVE A1", "MOVE A1 Z9"])
def test_move_parse_rejects(text):
    with pytest.raises(ValueError):
        Move.parse(text)


def test_wincon_text():
    assert WinCon.FIFTY_MOVES.describe() == "30 moves without captures."
    assert WinCon.ELIMINATION.describe() == "All pieces eliminated."


def test_split_fen():
    assert split_fen("a/b c") == ["a", "b", "c"]
    assert split_fen("x//y  z\n") == ["x", "y", "z"]
    assert split_fen("") == []


def test_random_faceup_piece_is_movable():
    rng = random.Random(7)
    for _ in range(200):
        piece = random_faceup_piece(rng)
        assert piece.side in (Color.RED, Color.BLACK)
        assert PieceType.GENERAL <= piece.type <= PieceType.SOLDIER