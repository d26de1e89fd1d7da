"""Chess position representation, hashing, move legality and search bookkeeping records."""

__version__ = "0.1.0"
__all__ = ["types", "bitboards", "zobrist", "score", "position", "rootmove"]