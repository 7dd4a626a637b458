"""Chinese Dark Chess (Banqi): rules, move generation, search engine and referee."""

__version__ = "0.1.0"

__all__ = [
    "bitboard",
    "engine",
    "helper",
    "material",
    "movegen",
    "position",
    "referee",
    "transposition",
    "types",
    "zobrist",
]