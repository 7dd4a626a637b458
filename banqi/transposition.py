"""Transposition table for the alpha-beta search."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .types import Move

DEFAULT_SIZE = 1 << 20
_MASK64 = (1 << 64) - 1


class TTFlag(IntEnum):
    EXACT = 0
    ALPHA = 1  # failed low: the score is an upper bound
    BETA = 2  # failed high: the score is a lower bound


@dataclass(slots=True)
class TTEntry:
    hash: int = 0
    depth: int = 0
    score: float = 0.0
    flag: TTFlag = TTFlag.EXACT
    best_move: Move | None = None


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a probe: whether it gives a usable score, and the narrowed window."""

    hit: bool
    alpha: float
    beta: float
    score: float | None = None
    move: Move | None = None


_EMPTY = TTEntry()


class TranspositionTable:
    """Fixed-size, always-indexed-by-low-bits hash table of search results."""

    def __init__(self, size: int = DEFAULT_SIZE) -> None:
        if size <= 0 or size & (size - 1):
            raise ValueError(f"table size must be a power of two, got {size}")
        self.size = size
        self._mask = size - 1
        self._table: dict[int, TTEntry] = {}

    def _slot(self, key: int) -> TTEntry:
        return self._table.get(key & self._mask, _EMPTY)

    def probe(self, key: int, alpha: float, beta: float, depth: int) -> ProbeResult:
        """Look up `key`; bound entries may narrow the (alpha, beta) window."""
        key &= _MASK64
        entry = self._slot(key)
        if entry.hash != key or entry.depth < depth:
            return ProbeResult(False, alpha, beta)

        if entry.flag == TTFlag.EXACT:
            return ProbeResult(True, alpha, beta, entry.score, entry.best_move)
        if entry.flag == TTFlag.ALPHA:
            beta = min(beta, entry.score)
        elif entry.flag == TTFlag.BETA:
            alpha = max(alpha, entry.score)

        if alpha >= beta:
            return ProbeResult(True, alpha, beta, entry.score, entry.best_move)
        return ProbeResult(False, alpha, beta, None, entry.best_move)

    def store(
        self, key: int, score: float, depth: int, flag: TTFlag, best_move: Move | None
    ) -> None:
        """Record a result unless a deeper one for the same key is already there."""
        key &= _MASK64
        entry = self._slot(key)
        if entry.hash != key or depth >= entry.depth:
            self._table[key & self._mask] = TTEntry(key, depth, score, TTFlag(flag), best_move)