"""Basic chess types: colours, pieces, squares, moves and score values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    def __invert__(self) -> "Color":
        return Color(int(self) ^ 1)


WHITE = Color.WHITE
BLACK = Color.BLACK
COLOR_NB = 2


class PieceType(IntEnum):
    NO_PIECE_TYPE = 0
    ALL_PIECES = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


PIECE_TYPE_NB = 8


class Piece(IntEnum):
    NO_PIECE = 0
    W_PAWN = 1
    W_KNIGHT = 2
    W_BISHOP = 3
    W_ROOK = 4
    W_QUEEN = 5
    W_KING = 6
    B_PAWN = 9
    B_KNIGHT = 10
    B_BISHOP = 11
    B_ROOK = 12
    B_QUEEN = 13
    B_KING = 14


PIECE_NB = 16

PIECE_TO_CHAR = " PNBRQK  pnbrqk"

ALL_PIECE_LIST = (
    Piece.W_PAWN, Piece.W_KNIGHT, Piece.W_BISHOP, Piece.W_ROOK, Piece.W_QUEEN, Piece.W_KING,
    Piece.B_PAWN, Piece.B_KNIGHT, Piece.B_BISHOP, Piece.B_ROOK, Piece.B_QUEEN, Piece.B_KING,
)


class MoveType(IntEnum):
    NORMAL = 0
    PROMOTION = 1 << 14
    EN_PASSANT = 2 << 14
    CASTLING = 3 << 14


class CastlingRights(IntFlag):
    NO_CASTLING = 0
    WHITE_OO = 1
    WHITE_OOO = 2
    BLACK_OO = 4
    BLACK_OOO = 8
    KING_SIDE = 5
    QUEEN_SIDE = 10
    WHITE_CASTLING = 3
    BLACK_CASTLING = 12
    ANY_CASTLING = 15

    @classmethod
    def of(cls, color: Color) -> "CastlingRights":
        """All castling rights belonging to ``color``."""
        return cls.WHITE_CASTLING if color == WHITE else cls.BLACK_CASTLING

    @classmethod
    def king_side(cls, color: Color) -> "CastlingRights":
        return cls.WHITE_OO if color == WHITE else cls.BLACK_OO

    @classmethod
    def queen_side(cls, color: Color) -> "CastlingRights":
        return cls.WHITE_OOO if color == WHITE else cls.BLACK_OOO


CASTLING_RIGHT_NB = 16

# Files and ranks
FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = range(8)
RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = range(8)
FILE_NB = 8

# Squares are plain integers 0..63 (a1 = 0, h8 = 63)
SQ_A1, SQ_B1, SQ_C1, SQ_D1, SQ_E1, SQ_F1, SQ_G1, SQ_H1 = range(8)
SQ_A8, SQ_B8, SQ_C8, SQ_D8, SQ_E8, SQ_F8, SQ_G8, SQ_H8 = range(56, 64)
SQ_NONE = 64
SQUARE_NB = 64

# Depths
DEPTH_QS = 0
DEPTH_UNSEARCHED = -2
MAX_PLY = 246
MAX_MOVES = 256

# Values
VALUE_ZERO = 0
VALUE_DRAW = 0
VALUE_NONE = 32002
VALUE_INFINITE = 32001
VALUE_MATE = 32000
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - MAX_PLY
VALUE_MATED_IN_MAX_PLY = -VALUE_MATE_IN_MAX_PLY
VALUE_TB = VALUE_MATE_IN_MAX_PLY - 1
VALUE_TB_WIN_IN_MAX_PLY = VALUE_TB - MAX_PLY
VALUE_TB_LOSS_IN_MAX_PLY = -VALUE_TB_WIN_IN_MAX_PLY

PAWN_VALUE = 208
KNIGHT_VALUE = 781
BISHOP_VALUE = 825
ROOK_VALUE = 1276
QUEEN_VALUE = 2538

_TYPE_VALUES = (VALUE_ZERO, PAWN_VALUE, KNIGHT_VALUE, BISHOP_VALUE, ROOK_VALUE, QUEEN_VALUE,
                VALUE_ZERO, VALUE_ZERO)
PIECE_VALUE = _TYPE_VALUES + _TYPE_VALUES
"""Material value indexed by piece code (kings and empty squares are zero)."""


def make_piece(color: Color, piece_type: PieceType) -> Piece:
    """Combine a colour and a piece type into a piece."""
    return Piece((int(color) << 3) + int(piece_type))


def color_of(piece: Piece) -> Color:
    if piece == Piece.NO_PIECE:
        raise ValueError("empty square has no colour")
    return Color(int(piece) >> 3)


def type_of(piece: Piece) -> PieceType:
    return PieceType(int(piece) & 7)


def make_square(file: int, rank: int) -> int:
    if not (0 <= file < 8 and 0 <= rank < 8):
        raise ValueError(f"file/rank out of range: {file}, {rank}")
    return (rank << 3) + file


def file_of(square: int) -> int:
    return square & 7


def rank_of(square: int) -> int:
    return square >> 3


def relative_rank(color: Color, square: int) -> int:
    """Rank of ``square`` as seen from ``color``'s side of the board."""
    return rank_of(square) ^ (int(color) * 7)


def relative_square(color: Color, square: int) -> int:
    """Mirror ``square`` vertically when ``color`` is black."""
    return square ^ (int(color) * 56)


def square_name(square: int) -> str:
    if not 0 <= square < SQUARE_NB:
        raise ValueError(f"not a square: {square}")
    return "abcdefgh"[file_of(square)] + "12345678"[rank_of(square)]


def parse_square(name: str) -> int:
    """Parse algebraic square notation such as ``e4``."""
    if len(name) != 2 or name[0] not in "abcdefgh" or name[1] not in "12345678":
        raise ValueError(f"invalid square: {name!r}")
    return make_square(ord(name[0]) - ord("a"), ord(name[1]) - ord("1"))


@dataclass(frozen=True)
class Move:
    """A move packed in 16 bits: destination, origin, promotion piece and move type."""

    data: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.data <= 0xFFFF:
            raise ValueError(f"move data out of range: {self.data}")

    @classmethod
    def make(cls, from_sq: int, to_sq: int, move_type: MoveType = MoveType.NORMAL,
             promotion: PieceType = PieceType.KNIGHT) -> "Move":
        if not (0 <= from_sq < SQUARE_NB and 0 <= to_sq < SQUARE_NB):
            raise ValueError("move squares out of range")
        if not PieceType.KNIGHT <= promotion <= PieceType.QUEEN:
            raise ValueError(f"invalid promotion piece: {promotion!r}")
        return cls(int(move_type) | ((int(promotion) - PieceType.KNIGHT) << 12)
                   | (from_sq << 6) | to_sq)

    @classmethod
    def none(cls) -> "Move":
        return cls(0)

    @classmethod
    def null(cls) -> "Move":
        return cls(65)

    @property
    def from_sq(self) -> int:
        return (self.data >> 6) & 0x3F

    @property
    def to_sq(self) -> int:
        return self.data & 0x3F

    @property
    def from_to(self) -> int:
        return self.data & 0xFFF

    @property
    def type_of(self) -> MoveType:
        return MoveType(self.data & (3 << 14))

    @property
    def promotion_type(self) -> PieceType:
        return PieceType(((self.data >> 12) & 3) + PieceType.KNIGHT)

    @property
    def is_ok(self) -> bool:
        return self.data not in (0, 65)

    def __bool__(self) -> bool:
        return self.data != 0

    def uci(self, chess960: bool = False) -> str:
        """Long algebraic notation; castling is king-to-rook only in Chess960."""
        if self.data == 0:
            return "(none)"
        if self.data == 65:
            return "0000"
        frm, to = self.from_sq, self.to_sq
        if self.type_of == MoveType.CASTLING and not chess960:
            to = make_square(FILE_G if to > frm else FILE_C, rank_of(frm))
        text = square_name(frm) + square_name(to)
        if self.type_of == MoveType.PROMOTION:
            text += " pnbrqk"[self.promotion_type]
        return text


def is_valid(value: int) -> bool:
    return value != VALUE_NONE


def is_win(value: int) -> bool:
    return value >= VALUE_TB_WIN_IN_MAX_PLY


def is_loss(value: int) -> bool:
    return value <= VALUE_TB_LOSS_IN_MAX_PLY


def is_decisive(value: int) -> bool:
    return is_win(value) or is_loss(value)


def mate_in(ply: int) -> int:
    return VALUE_MATE - ply


def mated_in(ply: int) -> int:
    return -VALUE_MATE + ply