import numpy as np
import pytest

from banqi.material import (
    BASE_SCORES,
    ELIMINATION_SCORE,
    MAT_SIZE,
    UNIT_INDICES,
    WIN_TIER_SCORES,
    base_score,
    can_capture_index,
    forced_win,
    generate_eval_table,
    generate_piece_score_table,
    index_to_counts,
    load_table,
    material_index,
    save_table,
)

GENERAL_ONLY = (0, 0, 0, 0, 0, 0, 1)
ADVISOR_ONLY = (0, 0, 0, 0, 0, 1, 0)
CANNON_ONLY = (0, 1, 0, 0, 0, 0, 0)


@pytest.fixture(scope="module")
def eval_table():
    return generate_eval_table()


@pytest.fixture(scope="module")
def piece_table():
    return generate_piece_score_table()


def test_index_round_trip():
    for idx in range(MAT_SIZE):
        assert material_index(index_to_counts(idx)) == idx


def test_unit_indices():
    assert material_index((1, 0, 0, 0, 0, 0, 0)) == 1
    assert material_index(GENERAL_ONLY) == 1458
    assert index_to_counts(MAT_SIZE - 1) == (5, 2, 2, 2, 2, 2, 1)


@pytest.mark.parametrize("bad", [(6, 0, 0, 0, 0, 0, 0), (0, 0, 0, 0, 0, 0, 2), (0, 0, 0)])
def test_material_index_rejects_bad_counts(bad):
    with pytest.raises(ValueError):
        material_index(bad)


@pytest.mark.parametrize("idx", [-1, MAT_SIZE])
def test_index_to_counts_rejects_out_of_range(idx):
    with pytest.raises(ValueError):
        index_to_counts(idx)


def test_base_score_values():
    assert base_score(GENERAL_ONLY, (0,) * 7) == BASE_SCORES[6]
    my, op = index_to_counts(1000), index_to_counts(2000)
    assert base_score(my, op) == -base_score(op, my)


def test_capture_rules():
    assert can_capture_index(0, 6) is True
    assert can_capture_index(6, 0) is False
    assert can_capture_index(1, 0) is False
    assert can_capture_index(5, 6) is False
    assert can_capture_index(6, 5) is True


def test_forced_win_general_against_lone_advisor():
    assert forced_win(GENERAL_ONLY, ADVISOR_ONLY) == 2
    assert forced_win(ADVISOR_ONLY, GENERAL_ONLY) == 0


def test_forced_win_against_lone_cannon_counts_capturing_kinds():
    my = (3, 0, 0, 0, 0, 1, 1)
    assert forced_win(my, CANNON_ONLY) == 2
    assert forced_win((3, 0, 0, 0, 0, 0, 0), CANNON_ONLY) == 0


def test_forced_win_none_when_cannon_has_company():
    assert forced_win(GENERAL_ONLY, (0, 1, 0, 0, 0, 1, 0)) == 0


def test_eval_table_shape_and_borders(eval_table):
    assert eval_table.shape == (MAT_SIZE, MAT_SIZE)
    assert (eval_table[0, :] == -ELIMINATION_SCORE).all()
    assert (eval_table[1:, 0] == ELIMINATION_SCORE).all()
    diag = np.diagonal(eval_table)[1:]
    assert (diag == 0).all()


def test_eval_table_general_beats_advisor(eval_table):
    g = material_index(GENERAL_ONLY)
    a = material_index(ADVISOR_ONLY)
    assert eval_table[g, a] == WIN_TIER_SCORES[2]
    assert eval_table[a, g] == -WIN_TIER_SCORES[2]


def test_eval_table_agrees_with_forced_win(eval_table):
    checked = 0
    for i in range(1, MAT_SIZE, 97):
        for j in range(1, MAT_SIZE, 89):
            if i == j:
                continue
            my, op = index_to_counts(i), index_to_counts(j)
            win, loss = forced_win(my, op), forced_win(op, my)
            if win:
                assert eval_table[i, j] == WIN_TIER_SCORES[min(win, 5)]
            elif loss:
                assert eval_table[i, j] == -WIN_TIER_SCORES[min(loss, 5)]
            else:
                assert eval_table[i, j] == base_score(my, op)
            checked += 1
    assert checked > 500


def test_piece_table_empty_side_scores_zero(piece_table):
    assert piece_table.shape == (MAT_SIZE, MAT_SIZE)
    assert (piece_table[0] == 0).all()


def test_piece_table_rows_combine(piece_table):
    s, n = UNIT_INDICES[0], UNIT_INDICES[1]
    assert (piece_table[s + n] == piece_table[s] + piece_table[n]).all()
    assert (piece_table[2 * s] == 2 * piece_table[s]).all()


def test_piece_table_lone_general_row_is_zero(piece_table):
    assert (piece_table[UNIT_INDICES[6]] == 0).all()


def test_piece_table_scores_positive_for_soldier(piece_table):
    assert (piece_table[UNIT_INDICES[0]] > 0).all()


def test_save_and_load_round_trip(tmp_path, eval_table):
    path = tmp_path / "material_scores.bin"
    save_table(eval_table, path)
    assert path.stat().st_size == MAT_SIZE * MAT_SIZE * 4
    loaded = load_table(path)
    assert np.array_equal(loaded, eval_table)


def test_load_rejects_wrong_size(tmp_path):
    path = tmp_path / "short.bin"
    path.write_bytes(b"\x00" * 16)
    with pytest.raises(ValueError):
        load_table(path)


def test_save_rejects_wrong_shape(tmp_path):
    with pytest.raises(ValueError):
        save_table(np.zeros((3, 3), dtype=np.int32), tmp_path / "x.bin")