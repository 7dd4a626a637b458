import pytest

from banqi.bitboard import PSEUDO_ATTACKS, squares
from banqi.movegen import MoveList, generate, generate_all, generate_moves
from banqi.position import Position
from banqi.types import SQUARE_NB, Color, Move, MoveType, PieceType, parse_square


def mv(text):
    return Move.parse(text)


def test_lone_general_moves_to_neighbours():
    pos = Position("k7/8/8/7K r")
    moves = list(MoveList(pos))
    assert all(m.src == parse_square("A1") for m in moves)
    assert {m.dst for m in moves} == set(squares(PSEUDO_ATTACKS[parse_square("A1")]))


def test_hidden_board_has_only_flips():
    pos = Position()
    pos.setup(True)
    moves = MoveList(pos)
    assert len(moves) == SQUARE_NB
    assert all(m.kind() == MoveType.FLIPPING for m in moves)


def test_moving_kind_on_hidden_board_is_empty():
    pos = Position()
    pos.setup(True)
    assert len(MoveList(pos, MoveType.MOVING)) == 0


def test_general_cannot_take_soldier():
    moves = list(MoveList(Position("kP6/8/8/8 r")))
    assert mv("MOVE A1 B1") not in moves
    assert mv("MOVE A1 A2") in moves


def test_soldier_takes_general():
    moves = list(MoveList(Position("pK6/8/8/8 r")))
    assert mv("MOVE A1 B1") in moves


def test_cannon_jumps_over_screen():
    moves = list(MoveList(Position("c1nN4/8/8/8 r")))
    assert mv("MOVE A1 D1") in moves
    assert mv("MOVE A1 B1") in moves
    assert mv("MOVE A1 C1") not in moves


def test_side_argument_selects_colour():
    pos = Position("kP6/8/8/8 r")
    moves = list(MoveList(pos, side=Color.BLACK))
    assert moves
    assert all(pos.peek_piece_at(m.src).side == Color.BLACK for m in moves)
    assert mv("MOVE B1 A1") in moves


def test_extend_and_deduplicate():
    pos = Position("c1nN4/8/8/8 r")
    ml = MoveList(pos)
    original = list(ml)
    ml.extend_moves(pos, PieceType.ALL_PIECES)
    assert len(ml) == 2 * len(original)
    ml.deduplicate()
    assert list(ml) == sorted(original)


def test_piece_type_restricts_generation():
    pos = Position("c1nN4/8/8/8 r")
    moves = generate(pos, MoveType.FLIPPING, Color.MYSTERY, PieceType.HORSE)
    assert moves
    assert all(pos.peek_piece_at(m.src).type == PieceType.HORSE for m in moves)


def test_generate_all_flipping_only():
    pos = Position("k?6/8/8/8 r")
    moves = generate_all(MoveType.FLIPPING, Color.RED, pos)
    assert moves == [mv("FLIP B1")]


def test_generate_moves_rejects_mystery_side():
    pos = Position("k7/8/8/8 r")
    with pytest.raises(ValueError):
        generate_moves(Color.MYSTERY, PieceType.GENERAL, pos)


def test_generate_rejects_hidden_type():
    pos = Position("k7/8/8/8 r")
    with pytest.raises(ValueError):
        generate(pos, MoveType.ALL, Color.RED, PieceType.HIDDEN)


def test_getitem_matches_iteration():
    ml = MoveList(Position("c1nN4/8/8/8 r"))
    assert [ml[i] for i in range(len(ml))] == list(ml)