import pytest

from banqi.position import Position
from banqi.types import Color, Move, Piece, PieceType
from banqi.zobrist import ZobristHash


def test_same_seed_gives_same_hashes():
    pos = Position("k?N5/K7/8/7c b")
    first = ZobristHash(7).compute(pos)
    second = ZobristHash(7).compute(pos)
    assert first == second
    assert first != 0
    assert ZobristHash(7).side_to_move_key == ZobristHash(7).side_to_move_key


def test_different_seeds_give_different_keys():
    assert ZobristHash(1).keys != ZobristHash(2).keys


def test_empty_board_red_to_move_hashes_to_zero():
    assert ZobristHash().compute(Position()) == 0


def test_side_to_move_toggles_side_key():
    zh = ZobristHash()
    red = Position("k7/K7/8/8 r")
    black = Position("k7/K7/8/8 b")
    assert zh.compute(red) ^ zh.compute(black) == zh.side_to_move_key


def test_hash_depends_on_piece_placement():
    zh = ZobristHash()
    assert zh.compute(Position("k7/8/8/8 r")) != zh.compute(Position("1k6/8/8/8 r"))


def test_hidden_and_revealed_differ():
    zh = ZobristHash()
    assert zh.compute(Position("?7/8/8/8 r")) != zh.compute(Position("k7/8/8/8 r"))


@pytest.mark.parametrize("mv", [Move(0, 8), Move(0, 1)])
def test_update_matches_recompute_after_move(mv):
    zh = ZobristHash()
    pos = Position("k7/K7/8/8 r")
    before = zh.compute(pos)
    updated = zh.update(before, mv, pos)
    assert pos.do_move(mv) is True
    assert updated == zh.compute(pos)


def test_update_matches_recompute_after_flip():
    zh = ZobristHash()
    pos = Position("k???????/????????/????????/???????? r")
    revealed = Piece(Color.BLACK, PieceType.CHARIOT)
    pos.clear_collection()
    pos.add_collection([revealed])
    before = zh.compute(pos)
    updated = zh.update(before, Move(1, 1), pos, revealed)
    assert pos.do_move(Move(1, 1)) is True
    assert pos.peek_piece_at(1) == revealed
    assert updated == zh.compute(pos)


def test_flip_without_piece_is_rejected():
    zh = ZobristHash()
    pos = Position("????????/????????/????????/???????? r")
    with pytest.raises(ValueError):
        zh.update(zh.compute(pos), Move(3, 3), pos)