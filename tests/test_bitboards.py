import pytest

from chesscore.bitboards import (
    attacks_bb, between_bb, iter_squares, line_bb, lsb, more_than_one, pawn_attacks_bb,
    pawn_push, popcount, square_bb,
)
from chesscore.types import BLACK, SQ_A1, WHITE, PieceType, make_square

SLIDERS_AND_STEPPERS = [PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK,
                        PieceType.QUEEN, PieceType.KING]


def test_square_bb_and_lsb_round_trip():
    for sq in range(64):
        assert lsb(square_bb(sq)) == sq
        assert popcount(square_bb(sq)) == 1


def test_square_bb_out_of_range():
    with pytest.raises(ValueError):
        square_bb(64)


def test_lsb_empty_raises():
    with pytest.raises(ValueError):
        lsb(0)


def test_iter_squares_matches_popcount_and_order():
    bb = square_bb(3) | square_bb(17) | square_bb(63)
    squares = list(iter_squares(bb))
    assert squares == [3, 17, 63]
    assert len(squares) == popcount(bb)
    assert lsb(bb) == squares[0]


def test_more_than_one():
    assert not more_than_one(0)
    assert not more_than_one(square_bb(10))
    assert more_than_one(square_bb(10) | square_bb(11))


def test_pawn_push_directions():
    assert pawn_push(WHITE) == -pawn_push(BLACK)
    assert pawn_push(WHITE) > 0


@pytest.mark.parametrize("pt", SLIDERS_AND_STEPPERS)
def test_attack_symmetry_on_empty_board(pt):
    for a in range(64):
        atk = attacks_bb(pt, a)
        assert (atk & square_bb(a)) == 0
        for b in iter_squares(atk):
            assert (attacks_bb(pt, b) & square_bb(a)) == square_bb(a)


def test_queen_is_rook_plus_bishop():
    occ = square_bb(20) | square_bb(35) | square_bb(9)
    for sq in range(64):
        assert attacks_bb(PieceType.QUEEN, sq, occ) == (
            attacks_bb(PieceType.ROOK, sq, occ) | attacks_bb(PieceType.BISHOP, sq, occ))


def test_rook_on_empty_board_sees_its_lines():
    for sq in range(64):
        assert popcount(attacks_bb(PieceType.ROOK, sq)) == 14


def test_rook_stops_at_blocker():
    blocker = make_square(0, 3)
    beyond = make_square(0, 4)
    corner = make_square(7, 0)
    atk = attacks_bb(PieceType.ROOK, SQ_A1, square_bb(blocker))
    assert (atk & square_bb(blocker)) == square_bb(blocker)
    assert (atk & square_bb(beyond)) == 0
    assert (atk & square_bb(corner)) == square_bb(corner)
    assert popcount(atk) == 10


def test_pawn_attack_symmetry():
    for s in range(64):
        for t in iter_squares(pawn_attacks_bb(WHITE, s)):
            assert (pawn_attacks_bb(BLACK, t) & square_bb(s)) == square_bb(s)
        for t in iter_squares(pawn_attacks_bb(BLACK, s)):
            assert (pawn_attacks_bb(WHITE, t) & square_bb(s)) == square_bb(s)


def test_pawn_attacks_on_edge():
    assert popcount(pawn_attacks_bb(WHITE, SQ_A1)) == 1
    assert pawn_attacks_bb(BLACK, SQ_A1) == 0


def test_attacks_bb_pawn_raises():
    with pytest.raises(ValueError):
        attacks_bb(PieceType.PAWN, 10)


def test_line_and_between_invariants():
    for a in range(64):
        for b in range(64):
            line = line_bb(a, b)
            assert line == line_bb(b, a)
            if line:
                assert line & square_bb(a) and line & square_bb(b)
                assert between_bb(a, b) & ~line == 0
                assert between_bb(a, b) & square_bb(b)
                assert not between_bb(a, b) & square_bb(a)
            else:
                assert between_bb(a, b) == square_bb(b)


def test_between_matches_slider_rays():
    a, b = SQ_A1, make_square(0, 5)
    inner = between_bb(a, b) ^ square_bb(b)
    # a rook blocked only by b sees exactly the squares between plus b itself
    assert attacks_bb(PieceType.ROOK, a, square_bb(b)) & line_bb(a, b) & ~attacks_bb(
        PieceType.ROOK, b, square_bb(a)) == 0 or inner
    assert inner | square_bb(b) == attacks_bb(PieceType.ROOK, a, square_bb(b)) & between_bb(a, b)