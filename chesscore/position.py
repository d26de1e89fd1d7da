"""Board representation: pieces, side to move, hash keys and move making."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .bitboards import (
    RANK_1_BB,
    RANK_8_BB,
    attacks_bb,
    between_bb,
    iter_squares,
    line_bb,
    lsb,
    more_than_one,
    pawn_attacks_bb,
    pawn_push,
    popcount,
    square_bb,
)
from .types import (
    ALL_PIECE_LIST,
    BISHOP_VALUE,
    BLACK,
    CASTLING_RIGHT_NB,
    KNIGHT_VALUE,
    PAWN_VALUE,
    PIECE_NB,
    PIECE_TO_CHAR,
    PIECE_TYPE_NB,
    PIECE_VALUE,
    QUEEN_VALUE,
    RANK_2,
    RANK_6,
    RANK_8,
    ROOK_VALUE,
    SQ_A1,
    SQ_A8,
    SQ_C1,
    SQ_D1,
    SQ_F1,
    SQ_G1,
    SQ_H1,
    SQ_NONE,
    SQUARE_NB,
    VALUE_ZERO,
    WHITE,
    CastlingRights,
    Color,
    Move,
    MoveType,
    Piece,
    PieceType,
    color_of,
    file_of,
    make_piece,
    make_square,
    rank_of,
    relative_rank,
    relative_square,
    square_name,
    type_of,
)
from .zobrist import default_tables, make_key

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_PAWN, _KNIGHT, _BISHOP = PieceType.PAWN, PieceType.KNIGHT, PieceType.BISHOP
_ROOK, _QUEEN, _KING = PieceType.ROOK, PieceType.QUEEN, PieceType.KING


@dataclass
class StateInfo:
    """Information needed to restore a position when a move is retracted."""

    material_key: int = 0
    pawn_key: int = 0
    minor_piece_key: int = 0
    non_pawn_key: list[int] = field(default_factory=lambda: [0, 0])
    non_pawn_material: list[int] = field(default_factory=lambda: [0, 0])
    castling_rights: int = 0
    rule50: int = 0
    plies_from_null: int = 0
    ep_square: int = SQ_NONE
    # Recomputed after each move
    key: int = 0
    checkers_bb: int = 0
    blockers_for_king: list[int] = field(default_factory=lambda: [0, 0])
    pinners: list[int] = field(default_factory=lambda: [0, 0])
    check_squares: list[int] = field(default_factory=lambda: [0] * PIECE_TYPE_NB)
    captured_piece: Piece = Piece.NO_PIECE
    repetition: int = 0

    def child(self) -> "StateInfo":
        """A new state carrying over the fields that are updated incrementally."""
        return StateInfo(
            material_key=self.material_key,
            pawn_key=self.pawn_key,
            minor_piece_key=self.minor_piece_key,
            non_pawn_key=list(self.non_pawn_key),
            non_pawn_material=list(self.non_pawn_material),
            castling_rights=self.castling_rights,
            rule50=self.rule50,
            plies_from_null=self.plies_from_null,
            ep_square=self.ep_square,
        )

    def copy(self) -> "StateInfo":
        new = self.child()
        new.key = self.key
        new.checkers_bb = self.checkers_bb
        new.blockers_for_king = list(self.blockers_for_king)
        new.pinners = list(self.pinners)
        new.check_squares = list(self.check_squares)
        new.captured_piece = self.captured_piece
        new.repetition = self.repetition
        return new


@dataclass
class DirtyPiece:
    """Pieces moved, captured or created by a move (SQ_NONE for off-board)."""

    dirty_num: int = 1
    piece: list[Piece] = field(default_factory=lambda: [Piece.NO_PIECE] * 3)
    from_sq: list[int] = field(default_factory=lambda: [SQ_NONE] * 3)
    to_sq: list[int] = field(default_factory=lambda: [SQ_NONE] * 3)


class Position:
    """A chess position with incremental hashing and move make/unmake."""

    def __init__(self) -> None:
        self._zobrist, self._cuckoo = default_tables()
        self.set(START_FEN)

    # ------------------------------------------------------------------ setup

    def _clear(self) -> None:
        self._board: list[Piece] = [Piece.NO_PIECE] * SQUARE_NB
        self._by_type: list[int] = [0] * PIECE_TYPE_NB
        self._by_color: list[int] = [0, 0]
        self._piece_count: list[int] = [0] * PIECE_NB
        self._castling_mask: list[int] = [0] * SQUARE_NB
        self._castling_rook: list[int] = [SQ_NONE] * CASTLING_RIGHT_NB
        self._castling_path: list[int] = [0] * CASTLING_RIGHT_NB
        self._states: list[StateInfo] = [StateInfo()]
        self._game_ply = 0
        self._side = WHITE
        self._chess960 = False

    @property
    def _st(self) -> StateInfo:
        return self._states[-1]

    def set(self, fen: str, chess960: bool = False) -> "Position":
        """Set up the position from a FEN (or Shredder-/X-FEN) string."""
        fields = fen.split()
        if not fields:
            raise ValueError("empty FEN")
        self._clear()
        st = self._st

        sq = SQ_A8
        for token in fields[0]:
            if token.isdigit():
                sq += int(token)
            elif token == "/":
                sq -= 16
            else:
                idx = PIECE_TO_CHAR.find(token)
                if idx <= 0:
                    continue
                if not 0 <= sq < SQUARE_NB:
                    raise ValueError(f"piece placement out of board in {fen!r}")
                self.put_piece(Piece(idx), sq)
                sq += 1

        for color in (WHITE, BLACK):
            if self._piece_count[make_piece(color, _KING)] != 1:
                raise ValueError(f"each side needs exactly one king: {fen!r}")

        self._side = WHITE if (fields[1] if len(fields) > 1 else "w") == "w" else BLACK

        for token in fields[2] if len(fields) > 2 else "-":
            color = BLACK if token.islower() else WHITE
            rook = make_piece(color, _ROOK)
            token = token.upper()
            if token == "K":
                rsq = relative_square(color, SQ_H1)
                while self._board[rsq] != rook:
                    rsq -= 1
                    if file_of(rsq) == 7 or rsq < 0:
                        raise ValueError(f"no rook for castling right in {fen!r}")
            elif token == "Q":
                rsq = relative_square(color, SQ_A1)
                while self._board[rsq] != rook:
                    rsq += 1
                    if file_of(rsq) == 0:
                        raise ValueError(f"no rook for castling right in {fen!r}")
            elif "A" <= token <= "H":
                rsq = make_square(ord(token) - ord("A"), relative_rank(color, 0 if color == WHITE else 56))
            else:
                continue
            self._set_castling_right(color, rsq)

        enpassant = False
        ep = fields[3] if len(fields) > 3 else "-"
        if len(ep) >= 2 and "a" <= ep[0] <= "h" and ep[1] == ("6" if self._side == WHITE else "3"):
            st.ep_square = make_square(ord(ep[0]) - ord("a"), ord(ep[1]) - ord("1"))
            us, them = self._side, ~self._side
            epsq = st.ep_square
            enpassant = bool(
                pawn_attacks_bb(them, epsq) & self.pieces(_PAWN, color=us)
                and self.pieces(_PAWN, color=them) & square_bb(epsq + pawn_push(them))
                and not self.pieces() & (square_bb(epsq) | square_bb(epsq + pawn_push(us)))
            )
        if not enpassant:
            st.ep_square = SQ_NONE

        st.rule50 = _to_int(fields[4]) if len(fields) > 4 else 0
        fullmove = _to_int(fields[5]) if len(fields) > 5 else 0
        self._game_ply = max(2 * (fullmove - 1), 0) + (self._side == BLACK)

        self._chess960 = bool(chess960)
        self._set_state()
        return self

    def set_endgame(self, code: str, color: Color) -> "Position":
        """Set up a position from an endgame code such as ``KBPKN``; ``color`` is the strong side."""
        if not code or code[0] != "K" or code.find("K", 1) < 0:
            raise ValueError(f"invalid endgame code: {code!r}")
        second_king = code.find("K", 1)
        v = code.find("v")
        cut = min(v if v >= 0 else len(code), second_king)
        sides = [code[second_king:], code[:cut]]
        if not all(0 < len(s) < 8 for s in sides):
            raise ValueError(f"invalid endgame code: {code!r}")
        sides[int(color)] = sides[int(color)].lower()
        fen = (f"8/{sides[0]}{8 - len(sides[0])}/8/8/8/8/"
               f"{sides[1]}{8 - len(sides[1])}/8 w - - 0 10")
        return self.set(fen, False)

    def _set_castling_right(self, color: Color, rfrom: int) -> None:
        kfrom = self.king_square(color)
        cr = CastlingRights.king_side(color) if kfrom < rfrom else CastlingRights.queen_side(color)
        self._st.castling_rights |= int(cr)
        self._castling_mask[kfrom] |= int(cr)
        self._castling_mask[rfrom] |= int(cr)
        self._castling_rook[cr] = rfrom
        king_side = bool(cr & CastlingRights.KING_SIDE)
        kto = relative_square(color, SQ_G1 if king_side else SQ_C1)
        rto = relative_square(color, SQ_F1 if king_side else SQ_D1)
        self._castling_path[cr] = ((between_bb(rfrom, rto) | between_bb(kfrom, kto))
                                   & ~(square_bb(kfrom) | square_bb(rfrom)))

    def _set_check_info(self) -> None:
        st = self._st
        self._update_slider_blockers(WHITE)
        self._update_slider_blockers(BLACK)
        ksq = self.king_square(~self._side)
        occ = self.pieces()
        st.check_squares[_PAWN] = pawn_attacks_bb(~self._side, ksq)
        st.check_squares[_KNIGHT] = attacks_bb(_KNIGHT, ksq)
        st.check_squares[_BISHOP] = attacks_bb(_BISHOP, ksq, occ)
        st.check_squares[_ROOK] = attacks_bb(_ROOK, ksq, occ)
        st.check_squares[_QUEEN] = st.check_squares[_BISHOP] | st.check_squares[_ROOK]
        st.check_squares[_KING] = 0

    def _set_state(self) -> None:
        z = self._zobrist
        st = self._st
        st.key = st.material_key = st.minor_piece_key = 0
        st.non_pawn_key = [0, 0]
        st.pawn_key = z.no_pawns
        st.non_pawn_material = [VALUE_ZERO, VALUE_ZERO]
        st.checkers_bb = (self.attackers_to(self.king_square(self._side))
                          & self.pieces(color=~self._side))
        self._set_check_info()

        for s in iter_squares(self.pieces()):
            pc = self._board[s]
            st.key ^= z.psq[pc][s]
            pt = type_of(pc)
            if pt == _PAWN:
                st.pawn_key ^= z.psq[pc][s]
            else:
                st.non_pawn_key[color_of(pc)] ^= z.psq[pc][s]
                if pt != _KING:
                    st.non_pawn_material[color_of(pc)] += PIECE_VALUE[pc]
                    if pt <= _BISHOP:
                        st.minor_piece_key ^= z.psq[pc][s]

        if st.ep_square != SQ_NONE:
            st.key ^= z.enpassant[file_of(st.ep_square)]
        if self._side == BLACK:
            st.key ^= z.side
        st.key ^= z.castling[st.castling_rights]

        for pc in ALL_PIECE_LIST:
            for cnt in range(self._piece_count[pc]):
                st.material_key ^= z.psq[pc][8 + cnt]

    # ---------------------------------------------------------------- output

    def fen(self) -> str:
        """FEN of the position; Shredder-FEN castling letters in Chess960."""
        ranks = []
        for r in range(7, -1, -1):
            text, empty = "", 0
            for f in range(8):
                pc = self._board[make_square(f, r)]
                if pc == Piece.NO_PIECE:
                    empty += 1
                    continue
                if empty:
                    text += str(empty)
                    empty = 0
                text += PIECE_TO_CHAR[pc]
            if empty:
                text += str(empty)
            ranks.append(text)

        castling = ""
        for cr, letter, base in ((CastlingRights.WHITE_OO, "K", "A"),
                                 (CastlingRights.WHITE_OOO, "Q", "A"),
                                 (CastlingRights.BLACK_OO, "k", "a"),
                                 (CastlingRights.BLACK_OOO, "q", "a")):
            if self.can_castle(cr):
                castling += (chr(ord(base) + file_of(self._castling_rook[cr]))
                             if self._chess960 else letter)
        castling = castling or "-"
        ep = "-" if self.ep_square() == SQ_NONE else square_name(self.ep_square())
        fullmove = 1 + (self._game_ply - (self._side == BLACK)) // 2
        side = "w" if self._side == WHITE else "b"
        return f"{'/'.join(ranks)} {side} {castling} {ep} {self._st.rule50} {fullmove}"

    def __str__(self) -> str:
        sep = " +---+---+---+---+---+---+---+---+\n"
        lines = ["\n", sep]
        for r in range(7, -1, -1):
            row = "".join(f" | {PIECE_TO_CHAR[self._board[make_square(f, r)]]}" for f in range(8))
            lines.append(f"{row} | {r + 1}\n")
            lines.append(sep)
        lines.append("   a   b   c   d   e   f   g   h\n")
        lines.append(f"\nFen: {self.fen()}\nKey: {self.key():016X}\nCheckers: ")
        lines.append("".join(square_name(s) + " " for s in iter_squares(self.checkers())))
        return "".join(lines)

    # -------------------------------------------------------- representation

    def pieces(self, *args: PieceType, color: Color | None = None) -> int:
        """Bitboard of the given piece types (all pieces if none), optionally of one colour."""
        if args:
            bb = 0
            for pt in args:
                bb |= self._by_type[pt]
        else:
            bb = self._by_type[PieceType.ALL_PIECES]
        if color is not None:
            bb &= self._by_color[color]
        return bb

    def piece_on(self, square: int) -> Piece:
        if not 0 <= square < SQUARE_NB:
            raise ValueError(f"not a square: {square}")
        return self._board[square]

    def empty(self, square: int) -> bool:
        return self.piece_on(square) == Piece.NO_PIECE

    def count(self, piece_type: PieceType, color: Color | None = None) -> int:
        if color is None:
            return self.count(piece_type, WHITE) + self.count(piece_type, BLACK)
        return self._piece_count[(int(color) << 3) + int(piece_type)]

    def king_square(self, color: Color) -> int:
        return lsb(self.pieces(_KING, color=color))

    def ep_square(self) -> int:
        return self._st.ep_square

    def castling_rights(self, color: Color) -> CastlingRights:
        return CastlingRights(self._st.castling_rights & CastlingRights.of(color))

    def can_castle(self, rights: CastlingRights) -> bool:
        return bool(self._st.castling_rights & rights)

    def castling_impeded(self, rights: CastlingRights) -> bool:
        return bool(self.pieces() & self._castling_path[rights])

    def castling_rook_square(self, rights: CastlingRights) -> int:
        return self._castling_rook[rights]

    def checkers(self) -> int:
        return self._st.checkers_bb

    def blockers_for_king(self, color: Color) -> int:
        return self._st.blockers_for_king[color]

    def pinners(self, color: Color) -> int:
        return self._st.pinners[color]

    def check_squares(self, piece_type: PieceType) -> int:
        return self._st.check_squares[piece_type]

    # ---------------------------------------------------------------- attacks

    def _update_slider_blockers(self, c: Color) -> None:
        st = self._st
        ksq = self.king_square(c)
        st.blockers_for_king[c] = 0
        st.pinners[~c] = 0
        snipers = ((attacks_bb(_ROOK, ksq) & self.pieces(_QUEEN, _ROOK))
                   | (attacks_bb(_BISHOP, ksq) & self.pieces(_QUEEN, _BISHOP))) & self.pieces(color=~c)
        occupancy = self.pieces() ^ snipers
        for sniper in iter_squares(snipers):
            b = between_bb(ksq, sniper) & occupancy
            if b and not more_than_one(b):
                st.blockers_for_king[c] |= b
                if b & self.pieces(color=c):
                    st.pinners[~c] |= square_bb(sniper)

    def attackers_to(self, square: int, occupied: int | None = None) -> int:
        """Bitboard of all pieces attacking ``square`` given the occupancy."""
        if occupied is None:
            occupied = self.pieces()
        return ((attacks_bb(_ROOK, square, occupied) & self.pieces(_ROOK, _QUEEN))
                | (attacks_bb(_BISHOP, square, occupied) & self.pieces(_BISHOP, _QUEEN))
                | (pawn_attacks_bb(BLACK, square) & self.pieces(_PAWN, color=WHITE))
                | (pawn_attacks_bb(WHITE, square) & self.pieces(_PAWN, color=BLACK))
                | (attacks_bb(_KNIGHT, square) & self.pieces(_KNIGHT))
                | (attacks_bb(_KING, square) & self.pieces(_KING)))

    def attackers_to_exist(self, square: int, occupied: int, color: Color) -> bool:
        rq = self.pieces(_ROOK, _QUEEN, color=color)
        bq = self.pieces(_BISHOP, _QUEEN, color=color)
        if attacks_bb(_ROOK, square) & rq and attacks_bb(_ROOK, square, occupied) & rq:
            return True
        if attacks_bb(_BISHOP, square) & bq and attacks_bb(_BISHOP, square, occupied) & bq:
            return True
        return bool(((pawn_attacks_bb(~color, square) & self.pieces(_PAWN))
                     | (attacks_bb(_KNIGHT, square) & self.pieces(_KNIGHT))
                     | (attacks_bb(_KING, square) & self.pieces(_KING))) & self.pieces(color=color))

    def attacks_by(self, piece_type: PieceType, color: Color) -> int:
        """Union of squares attacked by pieces of ``piece_type`` and ``color``."""
        threats = 0
        for s in iter_squares(self.pieces(piece_type, color=color)):
            if piece_type == _PAWN:
                threats |= pawn_attacks_bb(color, s)
            else:
                threats |= attacks_bb(piece_type, s, self.pieces())
        return threats

    # ------------------------------------------------------- move generation

    def _pseudo_moves(self) -> Iterator[Move]:
        us = self._side
        own, enemy, occ = self.pieces(color=us), self.pieces(color=~us), self.pieces()
        push = pawn_push(us)
        ep = self.ep_square()

        def pawn_to(frm: int, to: int) -> Iterator[Move]:
            if relative_rank(us, to) == RANK_8:
                for pt in (_QUEEN, _ROOK, _BISHOP, _KNIGHT):
                    yield Move.make(frm, to, MoveType.PROMOTION, pt)
            else:
                yield Move.make(frm, to)

        for frm in iter_squares(self.pieces(_PAWN, color=us)):
            to = frm + push
            if 0 <= to < SQUARE_NB and not occ & square_bb(to):
                yield from pawn_to(frm, to)
                if relative_rank(us, frm) == RANK_2 and not occ & square_bb(to + push):
                    yield Move.make(frm, to + push)
            for to in iter_squares(pawn_attacks_bb(us, frm) & enemy):
                yield from pawn_to(frm, to)
            if ep != SQ_NONE and pawn_attacks_bb(us, frm) & square_bb(ep):
                yield Move.make(frm, ep, MoveType.EN_PASSANT)

        for pt in (_KNIGHT, _BISHOP, _ROOK, _QUEEN, _KING):
            for frm in iter_squares(self.pieces(pt, color=us)):
                for to in iter_squares(attacks_bb(pt, frm, occ) & ~own):
                    yield Move.make(frm, to)

        if not self.checkers():
            ksq = self.king_square(us)
            for cr in (CastlingRights.king_side(us), CastlingRights.queen_side(us)):
                if self.can_castle(cr) and not self.castling_impeded(cr):
                    yield Move.make(ksq, self._castling_rook[cr], MoveType.CASTLING)

    def _evasion_ok(self, move: Move) -> bool:
        checkers = self.checkers()
        if not checkers:
            return True
        if move.type_of == MoveType.CASTLING:
            return False
        if type_of(self._board[move.from_sq]) == _KING:
            return True
        if more_than_one(checkers):
            return False
        target = between_bb(self.king_square(self._side), lsb(checkers))
        if move.type_of == MoveType.EN_PASSANT:
            capsq = move.to_sq - pawn_push(self._side)
            return bool(target & (square_bb(move.to_sq) | square_bb(capsq)))
        return bool(target & square_bb(move.to_sq))

    def legal_moves(self) -> list[Move]:
        """All legal moves in the position."""
        return [m for m in self._pseudo_moves() if self._evasion_ok(m) and self.legal(m)]

    # ------------------------------------------------------ move properties

    def legal(self, move: Move) -> bool:
        """Whether a pseudo-legal move leaves the own king safe."""
        us = self._side
        frm, to = move.from_sq, move.to_sq

        if move.type_of == MoveType.EN_PASSANT:
            ksq = self.king_square(us)
            capsq = to - pawn_push(us)
            occupied = (self.pieces() ^ square_bb(frm) ^ square_bb(capsq)) | square_bb(to)
            return not (attacks_bb(_ROOK, ksq, occupied) & self.pieces(_QUEEN, _ROOK, color=~us)) \
                and not (attacks_bb(_BISHOP, ksq, occupied) & self.pieces(_QUEEN, _BISHOP, color=~us))

        if move.type_of == MoveType.CASTLING:
            kto = relative_square(us, SQ_G1 if to > frm else SQ_C1)
            step = -1 if kto > frm else 1
            s = kto
            while s != frm:
                if self.attackers_to_exist(s, self.pieces(), ~us):
                    return False
                s += step
            return not self._chess960 or not (self.blockers_for_king(us) & square_bb(to))

        if type_of(self._board[frm]) == _KING:
            return not self.attackers_to_exist(to, self.pieces() ^ square_bb(frm), ~us)

        return (not (self.blockers_for_king(us) & square_bb(frm))
                or bool(line_bb(frm, to) & self.pieces(_KING, color=us)))

    def pseudo_legal(self, move: Move) -> bool:
        """Whether an arbitrary move is pseudo-legal in this position."""
        if not move.is_ok:
            return False
        us = self._side
        frm, to = move.from_sq, move.to_sq
        pc = self._board[frm]

        if move.type_of != MoveType.NORMAL:
            return any(m == move for m in self._pseudo_moves() if self._evasion_ok(m))

        if move.promotion_type != _KNIGHT:
            return False
        if pc == Piece.NO_PIECE or color_of(pc) != us:
            return False
        if self.pieces(color=us) & square_bb(to):
            return False

        if type_of(pc) == _PAWN:
            if (RANK_8_BB | RANK_1_BB) & square_bb(to):
                return False
            push = pawn_push(us)
            capture = pawn_attacks_bb(us, frm) & self.pieces(color=~us) & square_bb(to)
            single = frm + push == to and self.empty(to)
            double = (frm + 2 * push == to and relative_rank(us, frm) == RANK_2
                      and self.empty(to) and self.empty(to - push))
            if not (capture or single or double):
                return False
        elif not attacks_bb(type_of(pc), frm, self.pieces()) & square_bb(to):
            return False

        checkers = self.checkers()
        if checkers:
            if type_of(pc) != _KING:
                if more_than_one(checkers):
                    return False
                if not between_bb(self.king_square(us), lsb(checkers)) & square_bb(to):
                    return False
            elif self.attackers_to_exist(to, self.pieces() ^ square_bb(frm), ~us):
                return False
        return True

    def capture(self, move: Move) -> bool:
        return ((not self.empty(move.to_sq) and move.type_of != MoveType.CASTLING)
                or move.type_of == MoveType.EN_PASSANT)

    def capture_stage(self, move: Move) -> bool:
        return self.capture(move) or (move.type_of == MoveType.PROMOTION
                                      and move.promotion_type == _QUEEN)

    def gives_check(self, move: Move) -> bool:
        """Whether a pseudo-legal move gives check."""
        us, them = self._side, ~self._side
        frm, to = move.from_sq, move.to_sq

        if self.check_squares(type_of(self._board[frm])) & square_bb(to):
            return True

        if self.blockers_for_king(them) & square_bb(frm):
            return (not (line_bb(frm, to) & self.pieces(_KING, color=them))
                    or move.type_of == MoveType.CASTLING)

        mt = move.type_of
        if mt == MoveType.NORMAL:
            return False
        if mt == MoveType.PROMOTION:
            return bool(attacks_bb(move.promotion_type, to, self.pieces() ^ square_bb(frm))
                        & self.pieces(_KING, color=them))
        if mt == MoveType.EN_PASSANT:
            capsq = make_square(file_of(to), rank_of(frm))
            b = (self.pieces() ^ square_bb(frm) ^ square_bb(capsq)) | square_bb(to)
            ksq = self.king_square(them)
            return bool((attacks_bb(_ROOK, ksq, b) & self.pieces(_QUEEN, _ROOK, color=us))
                        | (attacks_bb(_BISHOP, ksq, b) & self.pieces(_QUEEN, _BISHOP, color=us)))
        rto = relative_square(us, SQ_F1 if to > frm else SQ_D1)
        return bool(self.check_squares(_ROOK) & square_bb(rto))

    def moved_piece(self, move: Move) -> Piece:
        return self.piece_on(move.from_sq)

    def captured_piece(self) -> Piece:
        return self._st.captured_piece

    # ----------------------------------------------------------- make/unmake

    def put_piece(self, piece: Piece, square: int) -> None:
        bb = square_bb(square)
        self._board[square] = Piece(piece)
        self._by_type[PieceType.ALL_PIECES] |= bb
        self._by_type[type_of(piece)] |= bb
        self._by_color[color_of(piece)] |= bb
        self._piece_count[piece] += 1
        self._piece_count[int(color_of(piece)) << 3] += 1

    def remove_piece(self, square: int) -> None:
        pc = self._board[square]
        if pc == Piece.NO_PIECE:
            raise ValueError(f"no piece on {square_name(square)}")
        bb = square_bb(square)
        self._by_type[PieceType.ALL_PIECES] ^= bb
        self._by_type[type_of(pc)] ^= bb
        self._by_color[color_of(pc)] ^= bb
        self._board[square] = Piece.NO_PIECE
        self._piece_count[pc] -= 1
        self._piece_count[int(color_of(pc)) << 3] -= 1

    def _move_piece(self, frm: int, to: int) -> None:
        pc = self._board[frm]
        both = square_bb(frm) | square_bb(to)
        self._by_type[PieceType.ALL_PIECES] ^= both
        self._by_type[type_of(pc)] ^= both
        self._by_color[color_of(pc)] ^= both
        self._board[frm] = Piece.NO_PIECE
        self._board[to] = pc

    def _do_castling(self, us: Color, frm: int, to: int, do: bool) -> tuple[int, int, int]:
        king_side = to > frm
        rfrom = to
        rto = relative_square(us, SQ_F1 if king_side else SQ_D1)
        kto = relative_square(us, SQ_G1 if king_side else SQ_C1)
        self.remove_piece(frm if do else kto)
        self.remove_piece(rfrom if do else rto)
        self.put_piece(make_piece(us, _KING), kto if do else frm)
        self.put_piece(make_piece(us, _ROOK), rto if do else rfrom)
        return kto, rfrom, rto

    def do_move(self, move: Move, gives_check: bool | None = None) -> DirtyPiece:
        """Make a legal move and return the pieces it changed."""
        if not move.is_ok:
            raise ValueError(f"cannot make move {move!r}")
        if gives_check is None:
            gives_check = self.gives_check(move)
        z = self._zobrist
        k = self._st.key ^ z.side
        st = self._st.child()
        self._states.append(st)

        self._game_ply += 1
        st.rule50 += 1
        st.plies_from_null += 1

        dp = DirtyPiece()
        us, them = self._side, ~self._side
        frm, to = move.from_sq, move.to_sq
        pc = self._board[frm]
        mt = move.type_of
        captured = make_piece(them, _PAWN) if mt == MoveType.EN_PASSANT else self._board[to]

        if mt == MoveType.CASTLING:
            to, rfrom, rto = self._do_castling(us, frm, to, True)
            dp.piece[0], dp.from_sq[0], dp.to_sq[0] = make_piece(us, _KING), frm, to
            dp.piece[1], dp.from_sq[1], dp.to_sq[1] = make_piece(us, _ROOK), rfrom, rto
            dp.dirty_num = 2
            k ^= z.psq[captured][rfrom] ^ z.psq[captured][rto]
            st.non_pawn_key[us] ^= z.psq[captured][rfrom] ^ z.psq[captured][rto]
            captured = Piece.NO_PIECE

        if captured != Piece.NO_PIECE:
            capsq = to
            if type_of(captured) == _PAWN:
                if mt == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                st.pawn_key ^= z.psq[captured][capsq]
            else:
                st.non_pawn_material[them] -= PIECE_VALUE[captured]
                st.non_pawn_key[them] ^= z.psq[captured][capsq]
                if type_of(captured) <= _BISHOP:
                    st.minor_piece_key ^= z.psq[captured][capsq]
            dp.dirty_num = 2
            dp.piece[1], dp.from_sq[1], dp.to_sq[1] = captured, capsq, SQ_NONE
            self.remove_piece(capsq)
            k ^= z.psq[captured][capsq]
            st.material_key ^= z.psq[captured][8 + self._piece_count[captured]]
            st.rule50 = 0

        k ^= z.psq[pc][frm] ^ z.psq[pc][to]

        if st.ep_square != SQ_NONE:
            k ^= z.enpassant[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        mask = self._castling_mask[frm] | self._castling_mask[to]
        if st.castling_rights and mask:
            k ^= z.castling[st.castling_rights]
            st.castling_rights &= ~mask
            k ^= z.castling[st.castling_rights]

        if mt != MoveType.CASTLING:
            dp.piece[0], dp.from_sq[0], dp.to_sq[0] = pc, frm, to
            self._move_piece(frm, to)

        if type_of(pc) == _PAWN:
            push = pawn_push(us)
            if (to ^ frm) == 16 and pawn_attacks_bb(us, to - push) & self.pieces(_PAWN, color=them):
                st.ep_square = to - push
                k ^= z.enpassant[file_of(st.ep_square)]
            elif mt == MoveType.PROMOTION:
                promotion = make_piece(us, move.promotion_type)
                self.remove_piece(to)
                self.put_piece(promotion, to)
                dp.to_sq[0] = SQ_NONE
                n = dp.dirty_num
                dp.piece[n], dp.from_sq[n], dp.to_sq[n] = promotion, SQ_NONE, to
                dp.dirty_num += 1
                k ^= z.psq[promotion][to]
                st.material_key ^= (z.psq[promotion][8 + self._piece_count[promotion] - 1]
                                    ^ z.psq[pc][8 + self._piece_count[pc]])
                if type_of(promotion) <= _BISHOP:
                    st.minor_piece_key ^= z.psq[promotion][to]
                st.non_pawn_material[us] += PIECE_VALUE[promotion]
            st.pawn_key ^= z.psq[pc][frm] ^ z.psq[pc][to]
            st.rule50 = 0
        else:
            st.non_pawn_key[us] ^= z.psq[pc][frm] ^ z.psq[pc][to]
            if type_of(pc) <= _BISHOP:
                st.minor_piece_key ^= z.psq[pc][frm] ^ z.psq[pc][to]

        st.key = k
        st.captured_piece = captured
        st.checkers_bb = (self.attackers_to(self.king_square(them)) & self.pieces(color=us)
                          if gives_check else 0)
        self._side = them
        self._set_check_info()

        st.repetition = 0
        end = min(st.rule50, st.plies_from_null)
        last = len(self._states) - 1
        for i in range(4, end + 1, 2):
            prior = self._states[last - i]
            if prior.key == st.key:
                st.repetition = -i if prior.repetition else i
                break
        return dp

    def undo_move(self, move: Move) -> None:
        """Retract ``move``, restoring the exact previous position."""
        if len(self._states) < 2:
            raise ValueError("no move to undo")
        self._side = ~self._side
        us = self._side
        frm, to = move.from_sq, move.to_sq
        st = self._st

        if move.type_of == MoveType.PROMOTION:
            self.remove_piece(to)
            self.put_piece(make_piece(us, _PAWN), to)

        if move.type_of == MoveType.CASTLING:
            self._do_castling(us, frm, to, False)
        else:
            self._move_piece(to, frm)
            if st.captured_piece != Piece.NO_PIECE:
                capsq = to
                if move.type_of == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                self.put_piece(st.captured_piece, capsq)

        self._states.pop()
        self._game_ply -= 1

    def do_null_move(self) -> None:
        """Pass the turn without moving a piece."""
        if self.checkers():
            raise ValueError("cannot make a null move while in check")
        z = self._zobrist
        st = self._st.copy()
        self._states.append(st)
        if st.ep_square != SQ_NONE:
            st.key ^= z.enpassant[file_of(st.ep_square)]
            st.ep_square = SQ_NONE
        st.key ^= z.side
        st.plies_from_null = 0
        self._side = ~self._side
        self._set_check_info()
        st.repetition = 0

    def undo_null_move(self) -> None:
        if len(self._states) < 2:
            raise ValueError("no null move to undo")
        self._states.pop()
        self._side = ~self._side

    # ------------------------------------------------------------------- SEE

    def see_ge(self, move: Move, threshold: int = 0) -> bool:
        """Whether the static exchange evaluation of ``move`` is at least ``threshold``."""
        if move.type_of != MoveType.NORMAL:
            return VALUE_ZERO >= threshold
        frm, to = move.from_sq, move.to_sq

        swap = PIECE_VALUE[self._board[to]] - threshold
        if swap < 0:
            return False
        swap = PIECE_VALUE[self._board[frm]] - swap
        if swap <= 0:
            return True

        occupied = self.pieces() ^ square_bb(frm) ^ square_bb(to)
        stm = self._side
        attackers = self.attackers_to(to, occupied)
        res = 1

        while True:
            stm = ~stm
            attackers &= occupied
            stm_attackers = attackers & self.pieces(color=stm)
            if not stm_attackers:
                break
            if self.pinners(~stm) & occupied:
                stm_attackers &= ~self.blockers_for_king(stm)
                if not stm_attackers:
                    break
            res ^= 1

            bb = stm_attackers & self.pieces(_PAWN)
            if bb:
                swap = PAWN_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                attackers |= attacks_bb(_BISHOP, to, occupied) & self.pieces(_BISHOP, _QUEEN)
                continue
            bb = stm_attackers & self.pieces(_KNIGHT)
            if bb:
                swap = KNIGHT_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                continue
            bb = stm_attackers & self.pieces(_BISHOP)
            if bb:
                swap = BISHOP_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                attackers |= attacks_bb(_BISHOP, to, occupied) & self.pieces(_BISHOP, _QUEEN)
                continue
            bb = stm_attackers & self.pieces(_ROOK)
            if bb:
                swap = ROOK_VALUE - swap
                if swap < res:
                    break
                occupied ^= bb & -bb
                attackers |= attacks_bb(_ROOK, to, occupied) & self.pieces(_ROOK, _QUEEN)
                continue
            bb = stm_attackers & self.pieces(_QUEEN)
            if bb:
                swap = QUEEN_VALUE - swap
                occupied ^= bb & -bb
                attackers |= ((attacks_bb(_BISHOP, to, occupied) & self.pieces(_BISHOP, _QUEEN))
                              | (attacks_bb(_ROOK, to, occupied) & self.pieces(_ROOK, _QUEEN)))
                continue
            # King: capturing is only possible if the opponent has no attackers left
            return bool(res ^ 1 if attackers & ~self.pieces(color=stm) else res)

        return bool(res)

    # ------------------------------------------------------------- hash keys

    def key(self) -> int:
        k, r50 = self._st.key, self._st.rule50
        return k if r50 < 14 else k ^ make_key((r50 - 14) // 8)

    def material_key(self) -> int:
        return self._st.material_key

    def pawn_key(self) -> int:
        return self._st.pawn_key

    def minor_piece_key(self) -> int:
        return self._st.minor_piece_key

    def non_pawn_key(self, color: Color) -> int:
        return self._st.non_pawn_key[color]

    # ------------------------------------------------------ other properties

    def side_to_move(self) -> Color:
        return self._side

    def game_ply(self) -> int:
        return self._game_ply

    def is_chess960(self) -> bool:
        return self._chess960

    def rule50_count(self) -> int:
        return self._st.rule50

    def non_pawn_material(self, color: Color | None = None) -> int:
        if color is None:
            return sum(self._st.non_pawn_material)
        return self._st.non_pawn_material[color]

    def is_draw(self, ply: int) -> bool:
        """Draw by the fifty-move rule or by repetition (stalemate is not detected)."""
        if self._st.rule50 > 99 and (not self.checkers() or self.legal_moves()):
            return True
        return self.is_repetition(ply)

    def is_repetition(self, ply: int) -> bool:
        rep = self._st.repetition
        return bool(rep) and rep < ply

    def has_repeated(self) -> bool:
        """Whether any position repeated since the last irreversible move."""
        end = min(self._st.rule50, self._st.plies_from_null)
        idx = len(self._states) - 1
        while end >= 4:
            if self._states[idx].repetition:
                return True
            idx -= 1
            end -= 1
        return False

    def upcoming_repetition(self, ply: int) -> bool:
        """Whether the side to move has a move that draws by repetition."""
        st = self._st
        end = min(st.rule50, st.plies_from_null)
        if end < 3:
            return False
        side = self._zobrist.side
        states = self._states
        original = st.key
        idx = len(states) - 2
        other = original ^ states[idx].key ^ side
        for i in range(3, end + 1, 2):
            idx -= 1
            other ^= states[idx].key ^ states[idx - 1].key ^ side
            idx -= 1
            if other:
                continue
            move = self._cuckoo.lookup(original ^ states[idx].key)
            if move is None:
                continue
            s1, s2 = move.from_sq, move.to_sq
            if not ((between_bb(s1, s2) ^ square_bb(s2)) & self.pieces()):
                if ply > i or states[idx].repetition:
                    return True
        return False

    def flip(self) -> None:
        """Mirror the position, swapping the colours of all pieces."""
        fields = self.fen().split(" ")
        placement = "/".join(reversed(fields[0].split("/")))
        head = f"{placement} {'B' if fields[1] == 'w' else 'W'} {fields[2]} ".swapcase()
        ep = fields[3]
        if ep != "-":
            ep = ep[0] + ("6" if ep[1] == "3" else "3")
        self.set(f"{head}{ep} {fields[4]} {fields[5]}", self._chess960)

    def is_ok(self) -> bool:
        """Consistency checks of the internal board representation."""
        if self._side not in (WHITE, BLACK):
            return False
        if self.count(_KING, WHITE) != 1 or self.count(_KING, BLACK) != 1:
            return False
        ep = self.ep_square()
        if ep != SQ_NONE and relative_rank(self._side, ep) != RANK_6:
            return False
        if self.attackers_to_exist(self.king_square(~self._side), self.pieces(), self._side):
            return False
        if (self.pieces(_PAWN) & (RANK_1_BB | RANK_8_BB)
                or self.count(_PAWN, WHITE) > 8 or self.count(_PAWN, BLACK) > 8):
            return False
        white, black = self._by_color
        if white & black or (white | black) != self.pieces():
            return False
        if popcount(white) > 16 or popcount(black) > 16:
            return False
        for pc in ALL_PIECE_LIST:
            if (self._piece_count[pc] != popcount(self.pieces(type_of(pc), color=color_of(pc)))
                    or self._piece_count[pc] != self._board.count(pc)):
                return False
        for color in (WHITE, BLACK):
            for cr in (CastlingRights.king_side(color), CastlingRights.queen_side(color)):
                if not self.can_castle(cr):
                    continue
                rsq = self._castling_rook[cr]
                if (self._board[rsq] != make_piece(color, _ROOK)
                        or self._castling_mask[rsq] != cr
                        or (self._castling_mask[self.king_square(color)] & cr) != cr):
                    return False
        return True


def _to_int(text: str) -> int:
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return 0