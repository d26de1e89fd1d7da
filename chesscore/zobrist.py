"""Zobrist hashing keys and the cuckoo table of reversible moves."""

from __future__ import annotations

from functools import lru_cache

from .bitboards import attacks_bb
from .types import (
    ALL_PIECE_LIST,
    CASTLING_RIGHT_NB,
    FILE_NB,
    PIECE_NB,
    SQ_A8,
    SQUARE_NB,
    Move,
    Piece,
    PieceType,
    type_of,
)

_MASK64 = (1 << 64) - 1
_CUCKOO_SIZE = 8192
DEFAULT_SEED = 1070372


def make_key(seed: int) -> int:
    """Derive a 64-bit key from an integer with a linear congruential step."""
    return (seed * 6364136223846793005 + 1442695040888963407) & _MASK64


class PRNG:
    """xorshift64* pseudo random number generator producing 64-bit values."""

    def __init__(self, seed: int) -> None:
        seed &= _MASK64
        if not seed:
            raise ValueError("PRNG seed must be non-zero")
        self._state = seed

    def rand(self) -> int:
        s = self._state
        s ^= s >> 12
        s ^= (s << 25) & _MASK64
        s ^= s >> 27
        self._state = s
        return (s * 2685821657736338717) & _MASK64


class Zobrist:
    """Random keys for pieces on squares, en passant files, castling rights and side."""

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        rng = PRNG(seed)
        self.psq: list[list[int]] = [[0] * SQUARE_NB for _ in range(PIECE_NB)]
        for pc in ALL_PIECE_LIST:
            self.psq[pc] = [rng.rand() for _ in range(SQUARE_NB)]
        # Pawns on these squares will promote, so they never contribute.
        self.psq[Piece.W_PAWN][SQ_A8:SQ_A8 + 8] = [0] * 8
        self.psq[Piece.B_PAWN][0:8] = [0] * 8

        self.enpassant: list[int] = [rng.rand() for _ in range(FILE_NB)]
        self.castling: list[int] = [rng.rand() for _ in range(CASTLING_RIGHT_NB)]
        self.side: int = rng.rand()
        self.no_pawns: int = rng.rand()


def _h1(key: int) -> int:
    return key & 0x1FFF


def _h2(key: int) -> int:
    return (key >> 16) & 0x1FFF


class CuckooTable:
    """Hash table of keys of reversible piece moves, used to detect upcoming repetitions."""

    def __init__(self, zobrist: Zobrist) -> None:
        self.keys: list[int] = [0] * _CUCKOO_SIZE
        self.moves: list[Move] = [Move.none()] * _CUCKOO_SIZE
        self.count = 0
        for pc in ALL_PIECE_LIST:
            pt = type_of(pc)
            if pt == PieceType.PAWN:
                continue
            for s1 in range(SQUARE_NB):
                reach = attacks_bb(pt, s1, 0)
                for s2 in range(s1 + 1, SQUARE_NB):
                    if reach & (1 << s2):
                        self._insert(zobrist.psq[pc][s1] ^ zobrist.psq[pc][s2] ^ zobrist.side,
                                     Move.make(s1, s2))
                        self.count += 1

    def _insert(self, key: int, move: Move) -> None:
        i = _h1(key)
        while True:
            self.keys[i], key = key, self.keys[i]
            self.moves[i], move = move, self.moves[i]
            if move == Move.none():
                return
            i = _h2(key) if i == _h1(key) else _h1(key)

    def lookup(self, key: int) -> Move | None:
        """Return the move whose key is ``key``, or None when no such move is stored."""
        for j in (_h1(key), _h2(key)):
            if self.keys[j] == key and self.moves[j] != Move.none():
                return self.moves[j]
        return None

    def __len__(self) -> int:
        return self.count


@lru_cache(maxsize=None)
def default_tables() -> tuple[Zobrist, CuckooTable]:
    """The shared Zobrist keys and cuckoo table built from the standard seed."""
    zobrist = Zobrist(DEFAULT_SEED)
    return zobrist, CuckooTable(zobrist)