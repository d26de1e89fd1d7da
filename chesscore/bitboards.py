"""Bitboard helpers and precomputed attack tables."""

from __future__ import annotations

from collections.abc import Iterator

from .types import BLACK, WHITE, Color, PieceType

FULL = (1 << 64) - 1
RANK_1_BB = 0xFF
RANK_8_BB = RANK_1_BB << 56

_ROOK_DIRS = ((0, 1), (0, -1), (1, 0), (-1, 0))
_BISHOP_DIRS = ((1, 1), (1, -1), (-1, 1), (-1, -1))
_KNIGHT_DELTAS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
_KING_DELTAS = _ROOK_DIRS + _BISHOP_DIRS


def square_bb(square: int) -> int:
    if not 0 <= square < 64:
        raise ValueError(f"not a square: {square}")
    return 1 << square


def popcount(bb: int) -> int:
    return bin(bb).count("1")


def lsb(bb: int) -> int:
    """Index of the least significant set bit."""
    if not bb:
        raise ValueError("empty bitboard has no least significant square")
    return (bb & -bb).bit_length() - 1


def _msb(bb: int) -> int:
    return bb.bit_length() - 1


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the squares of ``bb`` from lowest to highest."""
    while bb:
        low = bb & -bb
        yield low.bit_length() - 1
        bb ^= low


def more_than_one(bb: int) -> bool:
    return bool(bb & (bb - 1))


def pawn_push(color: Color) -> int:
    return 8 if color == WHITE else -8


def _offset_square(square: int, df: int, dr: int) -> int | None:
    f, r = (square & 7) + df, (square >> 3) + dr
    return r * 8 + f if 0 <= f < 8 and 0 <= r < 8 else None


def _step_table(deltas) -> list[int]:
    table = []
    for sq in range(64):
        bb = 0
        for df, dr in deltas:
            target = _offset_square(sq, df, dr)
            if target is not None:
                bb |= 1 << target
        table.append(bb)
    return table


def _ray(square: int, df: int, dr: int) -> int:
    bb = 0
    current = _offset_square(square, df, dr)
    while current is not None:
        bb |= 1 << current
        current = _offset_square(current, df, dr)
    return bb


_KNIGHT = _step_table(_KNIGHT_DELTAS)
_KING = _step_table(_KING_DELTAS)
_PAWN = {WHITE: _step_table(((-1, 1), (1, 1))), BLACK: _step_table(((-1, -1), (1, -1)))}
_RAYS = {d: [_ray(sq, *d) for sq in range(64)] for d in _KING_DELTAS}


def _slide(square: int, occupied: int, dirs) -> int:
    attacks = 0
    for df, dr in dirs:
        ray = _RAYS[(df, dr)][square]
        blockers = ray & occupied
        if blockers:
            first = lsb(blockers) if dr * 8 + df > 0 else _msb(blockers)
            ray &= ~_RAYS[(df, dr)][first]
        attacks |= ray
    return attacks


def _build_lines() -> tuple[list[list[int]], list[list[int]]]:
    line = [[0] * 64 for _ in range(64)]
    between = [[1 << b for b in range(64)] for _ in range(64)]
    for a in range(64):
        for df, dr in _KING_DELTAS:
            full = _RAYS[(df, dr)][a] | _RAYS[(-df, -dr)][a] | (1 << a)
            for b in iter_squares(_RAYS[(df, dr)][a]):
                line[a][b] = full
                between[a][b] = _RAYS[(df, dr)][a] & ~_RAYS[(df, dr)][b]
    return line, between


_LINE, _BETWEEN = _build_lines()


def pawn_attacks_bb(color: Color, square: int) -> int:
    """Squares attacked by a pawn of ``color`` standing on ``square``."""
    return _PAWN[Color(color)][square]


def attacks_bb(piece_type: PieceType, square: int, occupied: int = 0) -> int:
    """Attacks of a non-pawn piece on ``square`` given the board occupancy."""
    if not 0 <= square < 64:
        raise ValueError(f"not a square: {square}")
    if piece_type == PieceType.KNIGHT:
        return _KNIGHT[square]
    if piece_type == PieceType.KING:
        return _KING[square]
    if piece_type == PieceType.BISHOP:
        return _slide(square, occupied, _BISHOP_DIRS)
    if piece_type == PieceType.ROOK:
        return _slide(square, occupied, _ROOK_DIRS)
    if piece_type == PieceType.QUEEN:
        return _slide(square, occupied, _KING_DELTAS)
    raise ValueError(f"no attack table for {piece_type!r}")


def between_bb(a: int, b: int) -> int:
    """Squares from ``a`` (exclusive) to ``b`` (inclusive) on a shared line.

    When the squares are not aligned only ``b`` is returned.
    """
    return _BETWEEN[a][b]


def line_bb(a: int, b: int) -> int:
    """The full board line through ``a`` and ``b``, or 0 when they are not aligned."""
    return _LINE[a][b]