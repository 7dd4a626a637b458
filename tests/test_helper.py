import random

import pytest

from banqi.bitboard import squares
from banqi.helper import squares_sorted, strategy_random
from banqi.movegen import MoveList
from banqi.position import Position


def test_squares_sorted_by_piece_rank():
    pos = Position("pk?3K1/8/8/8 r")
    result = squares_sorted(pos, pos.pieces())
    types = [pos.peek_piece_at(sq).type for sq in result]
    assert types == sorted(types)
    assert set(result) == set(squares(pos.pieces()))


def test_squares_sorted_custom_key():
    pos = Position("pk?3K1/8/8/8 r")
    result = squares_sorted(pos, pos.pieces(), key=lambda sq: -sq)
    assert result == sorted(squares(pos.pieces()), reverse=True)


def test_strategy_random_picks_a_listed_move():
    moves = MoveList(Position("k7/8/8/7K r"))
    choice = strategy_random(moves, random.Random(5))
    assert choice in list(moves)
    assert strategy_random(moves, random.Random(5)) == choice


def test_strategy_random_with_no_moves():
    moves = MoveList(Position("8/8/8/8 r"))
    with pytest.raises(ValueError):
        strategy_random(moves, random.Random(1))