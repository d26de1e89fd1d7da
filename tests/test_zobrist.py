import pytest

from chesscore.types import Move, Piece, CASTLING_RIGHT_NB, SQ_A8
from chesscore.zobrist import PRNG, CuckooTable, Zobrist, default_tables, make_key


def test_prng_is_deterministic():
    a, b = PRNG(1070372), PRNG(1070372)
    assert [a.rand() for _ in range(20)] == [b.rand() for _ in range(20)]


def test_prng_values_fit_in_64_bits_and_vary():
    rng = PRNG(42)
    values = [rng.rand() for _ in range(100)]
    assert all(0 <= v < 1 << 64 for v in values)
    assert len(set(values)) == 100


def test_prng_different_seeds_differ():
    assert PRNG(1).rand() != PRNG(2).rand()


def test_prng_zero_seed_rejected():
    with pytest.raises(ValueError):
        PRNG(0)


def test_make_key_deterministic_and_64_bit():
    assert make_key(7) == make_key(7)
    assert make_key(7) != make_key(8)
    assert 0 <= make_key(10**30) < 1 << 64


def test_zobrist_promotion_squares_zero_for_pawns():
    z = Zobrist()
    assert z.psq[Piece.W_PAWN][SQ_A8:SQ_A8 + 8] == [0] * 8
    assert z.psq[Piece.B_PAWN][:8] == [0] * 8
    assert all(z.psq[Piece.W_PAWN][8:56])
    assert all(z.psq[Piece.W_KING])


def test_zobrist_empty_piece_has_no_keys():
    z = Zobrist()
    assert z.psq[Piece.NO_PIECE] == [0] * 64


def test_zobrist_sizes_and_reproducible():
    z1, z2 = Zobrist(), Zobrist()
    assert len(z1.enpassant) == 8
    assert len(z1.castling) == CASTLING_RIGHT_NB
    assert z1.side == z2.side
    assert z1.psq == z2.psq
    assert Zobrist(5).side != z1.side


def test_cuckoo_table_holds_all_reversible_moves():
    _, cuckoo = default_tables()
    assert len(cuckoo) == 3668
    assert sum(1 for m in cuckoo.moves if m != Move.none()) == 3668


def test_cuckoo_lookup_knight_move():
    zobrist, cuckoo = default_tables()
    g1, f3 = 6, 21
    key = zobrist.psq[Piece.W_KNIGHT][g1] ^ zobrist.psq[Piece.W_KNIGHT][f3] ^ zobrist.side
    assert cuckoo.lookup(key) == Move.make(g1, f3)


def test_cuckoo_every_stored_key_resolves_to_its_move():
    _, cuckoo = default_tables()
    for key, move in zip(cuckoo.keys, cuckoo.moves):
        if move != Move.none():
            assert cuckoo.lookup(key) == move


def test_cuckoo_pawn_moves_absent():
    zobrist, cuckoo = default_tables()
    e2, e3 = 12, 20
    key = zobrist.psq[Piece.W_PAWN][e2] ^ zobrist.psq[Piece.W_PAWN][e3] ^ zobrist.side
    assert cuckoo.lookup(key) is None


def test_cuckoo_built_from_other_keys():
    z = Zobrist(99)
    table = CuckooTable(z)
    key = z.psq[Piece.B_ROOK][0] ^ z.psq[Piece.B_ROOK][7] ^ z.side
    assert table.lookup(key) == Move.make(0, 7)