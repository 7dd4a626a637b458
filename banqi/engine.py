"""Alpha-beta search (NegaScout with Star1 chance nodes) for Chinese Dark Chess."""

from __future__ import annotations

import logging
import os
import time
from functools import lru_cache
from typing import NamedTuple

import numpy as np

from .bitboard import squares
from .material import MAT_SIZE, MAX_COUNTS, UNIT_INDICES, load_table
from .movegen import MoveList
from .position import Position
from .transposition import TranspositionTable, TTFlag
from .types import (
    SQUARE_NB,
    Color,
    Move,
    MoveType,
    Piece,
    PieceType,
    can_capture,
    distance,
    make_square,
)
from .zobrist import ZobristHash

log = logging.getLogger(__name__)

MATERIAL_FILE = "material_scores.bin"

# Bonus for the nearest attacker of each enemy piece, indexed by distance.
DISTANCE_TABLE_SCALED = (0.0, 0.5, 0.3, 0.2, 0.1, 0.05, 0.0, 0.0, 0.0, 0.0, 0.0)

# Move-ordering bonus for captures, [attacker][victim]; the last column is a plain walk.
YUMMY_TABLE = (
    (500, 300, 100, 30, 10, 30, 0, 10),
    (0, 300, 100, 30, 10, 30, 5, 10),
    (0, 0, 100, 30, 10, 30, 5, 12),
    (0, 0, 0, 50, 20, 50, 5, 20),
    (0, 0, 0, 0, 20, 50, 5, 15),
    (900, 300, 100, 50, 20, 50, 5, 20),
    (1000, 0, 0, 0, 0, 0, 10, 15),
)
FLIP_SCORE = 10

INF = 1e6
AB_WIN_SCORE = 300
MAX_TIME_MS = 15000.0
MIN_TIME_MS = 100.0
EXPECTED_PLYS = 80
EXPECTED_PLY_LONG = 120

SCORE_TT_MOVE = 100_000_000
SCORE_CAPTURE_BASE = 50_000_000
SCORE_FLIP_BASE = 40_000_000

V_MAX = 320.0
V_MIN = -320.0

MAX_DEPTH = 50
HISTORY_LIMIT = 1_000_000
DEFAULT_TIME_LIMIT_MS = 5000

INIT_COUNTS = {
    PieceType.GENERAL: 1,
    PieceType.ADVISOR: 2,
    PieceType.ELEPHANT: 2,
    PieceType.CHARIOT: 2,
    PieceType.HORSE: 2,
    PieceType.CANNON: 2,
    PieceType.SOLDIER: 5,
}

_SIDES = (Color.RED, Color.BLACK)
_MOVABLE = tuple(INIT_COUNTS)
# Piece types in material-index order (soldier first, general last).
_MATERIAL_ORDER = (
    PieceType.SOLDIER,
    PieceType.CANNON,
    PieceType.HORSE,
    PieceType.CHARIOT,
    PieceType.ELEPHANT,
    PieceType.ADVISOR,
    PieceType.GENERAL,
)
_TIME_CHECK_MASK = 255
_FIRST_FLIP = Move(make_square(3, 1), make_square(3, 1))


class ScoredMove(NamedTuple):
    mv: Move
    score: int


@lru_cache(maxsize=None)
def _load_default_table(path: str) -> np.ndarray:
    try:
        table = load_table(path)
    except (OSError, ValueError) as exc:
        log.error("could not load material table %s: %s", path, exc)
        return np.zeros((MAT_SIZE, MAT_SIZE), dtype=np.int32)
    log.debug("material table loaded")
    return table


class AlphaBetaEngine:
    """Iterative-deepening searcher that picks a move for the side to play."""

    def __init__(self, material_table=None, time_limit_ms: float = DEFAULT_TIME_LIMIT_MS) -> None:
        if material_table is None:
            material_table = _load_default_table(os.path.abspath(MATERIAL_FILE))
        table = np.asarray(material_table)
        if table.shape != (MAT_SIZE, MAT_SIZE):
            raise ValueError(f"material table must be {MAT_SIZE}x{MAT_SIZE}, got {table.shape}")
        self.material_table = table
        self.time_limit_ms = time_limit_ms
        self.tt = TranspositionTable()
        self.zobrist = ZobristHash()
        self._time_out = False
        self._node_count = 0
        self._start = 0.0
        self.init_game()

    def init_game(self) -> None:
        """Reset all per-game state."""
        self.ply_count = 0
        self.no_eat_flip = 0
        self.prev_total_count = SQUARE_NB
        self.history = [[0] * SQUARE_NB for _ in range(SQUARE_NB)]
        self.unrevealed = {c: dict(INIT_COUNTS) for c in _SIDES}
        self.revealed = {c: {pt: 0 for pt in _MOVABLE} for c in _SIDES}
        self._prev_choices: dict[int, Move] = {}

    def update_unrevealed(self, pos: Position) -> None:
        """Take newly revealed pieces out of the face-down counts."""
        for c in _SIDES:
            for pt in _MOVABLE:
                current = pos.count(c, pt)
                diff = current - self.revealed[c][pt]
                if diff > 0:
                    self.unrevealed[c][pt] = max(0, self.unrevealed[c][pt] - diff)
                self.revealed[c][pt] = current
        self.prev_total_count = pos.count()

    # -- evaluation --

    def evaluate(self, pos: Position, depth: int) -> float:
        """Score from the side to play's view; decided games score as wins or losses."""
        winner = pos.winner()
        if winner != Color.NO_COLOR:
            if winner == pos.due_up():
                return float(AB_WIN_SCORE + depth)
            if winner == Color.MYSTERY:
                return 0.0
            return -float(AB_WIN_SCORE + depth)
        return self.position_score(pos, pos.due_up())

    def _material_index(self, pos: Position, color: Color) -> int:
        return sum(
            min(pos.count(color, pt), limit) * unit
            for pt, limit, unit in zip(_MATERIAL_ORDER, MAX_COUNTS, UNIT_INDICES)
        )

    def position_score(self, pos: Position, color: Color) -> float:
        """Material table score plus a bonus for attackers close to their prey."""
        opp = color.opponent()
        score = float(
            self.material_table[self._material_index(pos, color), self._material_index(pos, opp)]
        )
        if not (pos.count(color) and pos.count(opp)):
            return score
        mine = [(sq, pos.peek_piece_at(sq).type) for sq in squares(pos.pieces_of(color))]
        for opp_sq in squares(pos.pieces_of(opp)):
            opp_type = pos.peek_piece_at(opp_sq).type
            dists = [
                distance(my_sq, opp_sq)
                for my_sq, my_type in mine
                if can_capture(my_type, opp_type) and not can_capture(opp_type, my_type)
            ]
            if dists:
                score += DISTANCE_TABLE_SCALED[min(dists)]
        return score

    # -- move ordering --

    def ordered_moves(self, pos: Position, tt_move: Move | None = None) -> list[ScoredMove]:
        """Legal moves, most promising first; a repeat of an earlier choice is skipped when ahead."""
        prev_choice = self._prev_choices.get(self.zobrist.compute(pos))
        ahead: bool | None = None
        moves: list[ScoredMove] = []
        for mv in MoveList(pos):
            if mv == prev_choice:
                if ahead is None:
                    ahead = self.position_score(pos, pos.due_up()) > 0
                if ahead:
                    continue
            if mv == tt_move:
                score = SCORE_TT_MOVE
            elif mv.kind() == MoveType.FLIPPING:
                score = SCORE_FLIP_BASE + FLIP_SCORE
            else:
                mover = pos.peek_piece_at(mv.src).type
                victim = pos.peek_piece_at(mv.dst).type
                if victim != PieceType.NO_PIECE:
                    score = SCORE_CAPTURE_BASE + YUMMY_TABLE[mover][victim]
                else:
                    score = self.history[mv.src][mv.dst]
            moves.append(ScoredMove(mv, score))
        moves.sort(key=lambda sm: sm.score, reverse=True)
        return moves

    def _age_history(self) -> None:
        for row in self.history:
            row[:] = [v >> 1 for v in row]

    def _reward(self, mv: Move, depth: int) -> None:
        self.history[mv.src][mv.dst] += 1 << min(depth, 14)

    # -- timing --

    def estimate_ply_time(self, pos: Position) -> float:
        """Milliseconds to spend on this ply, from the clock and expected game length."""
        exp_ply = self.ply_count + pos.count() + self.no_eat_flip
        if exp_ply < EXPECTED_PLYS:
            exp_ply = EXPECTED_PLYS
        elif exp_ply < EXPECTED_PLY_LONG:
            exp_ply = EXPECTED_PLY_LONG
        share = pos.time_left() / (exp_ply - self.ply_count + 1)
        return max(MIN_TIME_MS, min(MAX_TIME_MS, share))

    def _out_of_time(self) -> bool:
        self._node_count += 1
        if (self._node_count & _TIME_CHECK_MASK) == 0:
            if (time.monotonic() - self._start) * 1000.0 > self.time_limit_ms:
                self._time_out = True
        return self._time_out

    # -- search --

    def _star1(self, mv: Move, pos: Position, alpha: float, beta: float, depth: int, key: int) -> float:
        """Chance node for a flip: weighted over every piece that could be revealed."""
        total = pos.count(PieceType.HIDDEN)
        vsum = 0.0
        low, high = V_MIN, V_MAX
        a = total * (alpha - V_MAX)
        b = total * (beta - V_MIN)
        for c in _SIDES:
            for pt in reversed(_MOVABLE):
                count = self.unrevealed[c][pt]
                if count <= 0:
                    continue
                piece = Piece(c, pt)
                child = pos.copy()
                child.clear_collection()
                child.add_collection([piece])
                child.do_move(mv)
                child_key = self.zobrist.update(key, mv, pos, piece)

                self.unrevealed[c][pt] -= 1
                a = a / count + V_MAX
                b = b / count + V_MIN
                search_alpha = max(V_MIN, min(a, V_MAX))
                search_beta = max(V_MIN, min(b, V_MAX))
                value, _ = self._negascout(child, -search_beta, -search_alpha, depth, child_key)
                self.unrevealed[c][pt] += 1

                t = max(V_MIN, min(-value, V_MAX))
                probability = count / total
                low += (t - V_MIN) * probability
                high += (t - V_MAX) * probability
                if t >= b:
                    return low
                if t <= a:
                    return high
                a = count * (a - t)
                b = count * (b - t)
                vsum += t * probability
        return vsum

    def _try_move(self, pos: Position, mv: Move, alpha: float, beta: float, depth: int, key: int) -> float:
        if mv.kind() == MoveType.FLIPPING:
            return self._star1(mv, pos, alpha, beta, depth - 1, key)
        child = pos.copy()
        child.do_move(mv)
        child_key = self.zobrist.update(key, mv, pos)
        value, _ = self._negascout(child, -beta, -alpha, depth - 1, child_key)
        return -value

    def _negascout(
        self,
        pos: Position,
        alpha: float,
        beta: float,
        depth: int,
        key: int,
        pv_hint: Move | None = None,
    ) -> tuple[float, Move | None]:
        if self._out_of_time():
            return 0.0, None

        probe = self.tt.probe(key, alpha, beta, depth)
        tt_move = probe.move
        if probe.hit:
            return probe.score, tt_move
        alpha, beta = probe.alpha, probe.beta

        if depth <= 0 or pos.winner() != Color.NO_COLOR:
            return self.evaluate(pos, depth), None

        moves = self.ordered_moves(pos, pv_hint if pv_hint is not None else tt_move)
        if not moves:
            return -float(AB_WIN_SCORE + depth), None

        best_value = -INF
        n = beta
        best = moves[0].mv
        for mv, _ in moves:
            flipping = mv.kind() == MoveType.FLIPPING
            upper = beta if flipping else n
            t = self._try_move(pos, mv, max(alpha, best_value), upper, depth, key)
            if self._time_out:
                return 0.0, best

            if t > best_value:
                if n == beta or depth < 3 or t >= beta or flipping:
                    best_value = t
                else:
                    best_value = self._try_move(pos, mv, t, beta, depth, key)
                    if self._time_out:
                        return 0.0, best
                best = mv

            if best_value >= beta:
                self.tt.store(key, best_value, depth, TTFlag.BETA, best)
                if not flipping:
                    self._reward(mv, depth)
                    if self.history[mv.src][mv.dst] > HISTORY_LIMIT:
                        self._age_history()
                return best_value, best
            n = max(alpha, best_value) + 0.001

        if best_value > alpha:
            self.tt.store(key, best_value, depth, TTFlag.EXACT, best)
            if best.kind() != MoveType.FLIPPING:
                self._reward(best, depth)
        else:
            self.tt.store(key, best_value, depth, TTFlag.ALPHA, best)
        return best_value, best

    def _dodge_flip(self, pos: Position) -> Move | None:
        """Flip the hidden square farthest from the opponent's only revealed piece."""
        opp_board = pos.pieces_of(pos.due_up().opponent())
        if not opp_board:
            return None
        opp_sq = next(squares(opp_board))
        best: Move | None = None
        max_dist = -1
        for sq in range(SQUARE_NB):
            if pos.peek_piece_at(sq).type == PieceType.HIDDEN:
                d = distance(opp_sq, sq)
                if d > max_dist:
                    max_dist = d
                    best = Move(sq, sq)
        return best

    def search(self, pos: Position) -> Move:
        """Choose a move for the side to play within the time limit."""
        self._start = time.monotonic()
        self._time_out = False
        self._node_count = 0

        hidden = pos.count(PieceType.HIDDEN)
        if hidden == SQUARE_NB:
            self.init_game()
            return _FIRST_FLIP
        self.ply_count += 1
        self.update_unrevealed(pos)
        if hidden == SQUARE_NB - 1:
            dodge = self._dodge_flip(pos)
            if dodge is not None:
                return dodge

        key = self.zobrist.compute(pos)
        moves = self.ordered_moves(pos, None)
        if moves:
            best_root = moves[0].mv
        else:
            raw = MoveList(pos)
            if not len(raw):
                raise ValueError("no legal moves in this position")
            best_root = raw[0]

        for depth in range(1, MAX_DEPTH + 1):
            _, best_iter = self._negascout(pos, -INF, INF, depth, key, best_root)
            if best_iter is not None:
                best_root = best_iter
            if self._time_out:
                break

        self._prev_choices[key] = best_root
        return best_root