"""Material evaluation tables indexed by piece counts.

A side's material is encoded as one index in mixed radix, least significant
first: soldiers (0-5), cannons, horses, chariots, elephants, advisors (0-2
each) and the general (0-1), giving 2916 possible indices.
"""

from __future__ import annotations

import math
import os
from functools import lru_cache
from typing import Sequence

import numpy as np

I_SOLDIER = 0
I_CANNON = 1
I_HORSE = 2
I_CHARIOT = 3
I_ELEPHANT = 4
I_ADVISOR = 5
I_GENERAL = 6
P_COUNT = 7

MAX_COUNTS = (5, 2, 2, 2, 2, 2, 1)
BASE_SCORES = (1, 10, 3, 5, 10, 15, 30)
WIN_TIER_SCORES = (0, 150, 185, 220, 255, 290)
ELIMINATION_SCORE = 300

MAT_SIZE = 2916

# Index of a single piece of each kind, in count order.
UNIT_INDICES = (1, 6, 18, 54, 162, 486, 1458)
# The lone-general score of the piece table is kept in this row.
_GENERAL_SCORE_ROW = 972


def material_index(counts: Sequence[int]) -> int:
    """Encode seven piece counts (soldier first, general last) as one index."""
    if len(counts) != P_COUNT:
        raise ValueError(f"expected {P_COUNT} counts, got {len(counts)}")
    index = 0
    for count, limit, unit in zip(counts, MAX_COUNTS, UNIT_INDICES):
        if not 0 <= count <= limit:
            raise ValueError(f"count {count} out of range 0..{limit}")
        index += count * unit
    return index


def index_to_counts(idx: int) -> tuple[int, ...]:
    """Decode a material index into seven piece counts."""
    if not 0 <= idx < MAT_SIZE:
        raise ValueError(f"material index {idx} out of range")
    counts = []
    for limit in MAX_COUNTS:
        idx, count = divmod(idx, limit + 1)
        counts.append(count)
    return tuple(counts)


def base_score(my_counts: Sequence[int], op_counts: Sequence[int]) -> int:
    """Plain material difference using the base piece values."""
    return sum(w * (m - o) for w, m, o in zip(BASE_SCORES, my_counts, op_counts))


def can_capture_index(attacker: int, victim: int) -> bool:
    """Capture rule on count indices; cannons are not counted as capturers."""
    if attacker == I_CANNON:
        return False
    if attacker == I_SOLDIER:
        return victim in (I_GENERAL, I_SOLDIER)
    if attacker == I_GENERAL and victim == I_SOLDIER:
        return False
    return attacker >= victim


def forced_win(my_counts: Sequence[int], op_counts: Sequence[int]) -> int:
    """Strength of a forced win for `my_counts` (0 means none)."""
    total_op = sum(op_counts)
    if op_counts[I_CANNON] > 0:
        if total_op == 1:
            return sum(
                1
                for i in range(P_COUNT)
                if my_counts[i] > 0 and can_capture_index(i, I_CANNON)
            )
        return 0

    present = [j for j in range(P_COUNT) if op_counts[j] > 0]
    total_forced = sum(
        my_counts[i]
        for i in range(P_COUNT)
        if all(can_capture_index(i, j) and i != j for j in present)
    )
    if total_forced == 1:
        return 2 if total_op == 1 else 1
    return total_forced


@lru_cache(maxsize=None)
def _count_matrix() -> np.ndarray:
    counts = np.array([index_to_counts(i) for i in range(MAT_SIZE)], dtype=np.int16)
    counts.setflags(write=False)
    return counts


def generate_eval_table() -> np.ndarray:
    """Table of material scores, [my index][opponent index]."""
    counts = _count_matrix()
    capture = np.array(
        [[can_capture_index(a, v) for v in range(P_COUNT)] for a in range(P_COUNT)]
    )
    allowed = capture & ~np.eye(P_COUNT, dtype=bool)
    present = (counts > 0).astype(np.int16)

    # cap_all[j, a]: type a can take every kind of piece opponent j still has.
    blocked = (present @ (~allowed).astype(np.int16).T) > 0
    cap_all = (~blocked).astype(np.int16)
    total = counts.sum(axis=1)
    single = total == 1

    forced = counts @ cap_all.T
    forced = np.where(forced == 1, np.where(single, 2, 1).astype(np.int16)[None, :], forced)

    strong = ((counts > 0) & capture[:, I_CANNON][None, :]).sum(axis=1).astype(np.int16)
    lone_cannon = np.where(single[None, :], strong[:, None], np.int16(0))
    forced = np.where((counts[:, I_CANNON] > 0)[None, :], lone_cannon, forced)

    tiers = np.array(WIN_TIER_SCORES, dtype=np.int32)
    # Wins stronger than the top tier are scored as the top tier.
    clamped = np.minimum(forced, len(WIN_TIER_SCORES) - 1)
    score = counts.astype(np.int32) @ np.array(BASE_SCORES, dtype=np.int32)
    base = score[:, None] - score[None, :]

    table = np.where(
        forced != 0,
        tiers[clamped],
        np.where(forced.T != 0, -tiers[clamped.T], base),
    ).astype(np.int32)

    np.fill_diagonal(table, 0)
    table[:, 0] = ELIMINATION_SCORE
    table[0, :] = -ELIMINATION_SCORE
    return table


def _round_score(exponent: float) -> int:
    return math.floor(1.5**exponent + 0.5)


def generate_piece_score_table() -> np.ndarray:
    """Table of per-piece exponential scores summed over each side's pieces."""
    scores = np.zeros((MAT_SIZE, MAT_SIZE), dtype=np.int64)

    for opp in range(MAT_SIZE):
        s, n, h, c, e, a, g = index_to_counts(opp)
        predator = a + e + c + h + n
        scores[UNIT_INDICES[I_SOLDIER], opp] = _round_score(16 - predator - s / 2.0)
        predator += g
        scores[UNIT_INDICES[I_CANNON], opp] = _round_score(16 - predator / 2.0)
        predator -= n + h
        scores[UNIT_INDICES[I_HORSE], opp] = _round_score(16 - predator - (h + n) / 2.0)
        predator -= c
        scores[UNIT_INDICES[I_CHARIOT], opp] = _round_score(16 - predator - (c + n) / 2.0)
        predator -= e
        scores[UNIT_INDICES[I_ELEPHANT], opp] = _round_score(16 - predator - (e + n) / 2.0)
        predator -= a
        scores[UNIT_INDICES[I_ADVISOR], opp] = _round_score(16 - predator - (a + n) / 2.0)
        scores[_GENERAL_SCORE_ROW, opp] = _round_score(16 - s - (g + n) / 2.0)

    # Rows are combined in index order, each using the rows as they stand.
    for idx in range(MAT_SIZE):
        for count, row in zip(index_to_counts(idx), UNIT_INDICES):
            if count:
                scores[idx] += count * scores[row]

    return scores.astype(np.int32)


def save_table(table: np.ndarray, path: str | os.PathLike) -> None:
    """Write a table as raw little-endian 32-bit integers, row by row."""
    data = np.ascontiguousarray(table, dtype="<i4")
    if data.shape != (MAT_SIZE, MAT_SIZE):
        raise ValueError(f"table must be {MAT_SIZE}x{MAT_SIZE}, got {data.shape}")
    with open(path, "wb") as fh:
        fh.write(data.tobytes())


def load_table(path: str | os.PathLike) -> np.ndarray:
    """Read a table written by save_table."""
    with open(path, "rb") as fh:
        raw = fh.read()
    data = np.frombuffer(raw, dtype="<i4")
    if data.size != MAT_SIZE * MAT_SIZE or len(raw) % 4:
        raise ValueError(f"{os.fspath(path)!r} does not hold a {MAT_SIZE}x{MAT_SIZE} table")
    return data.reshape(MAT_SIZE, MAT_SIZE).astype(np.int32)