import pytest

from chesscore.position import START_FEN, Position
from chesscore.types import BLACK, WHITE, Move, Piece, PieceType, parse_square


def play(pos, *moves):
    for text in moves:
        move = next(m for m in pos.legal_moves() if m.uci(pos.is_chess960()) == text)
        pos.do_move(move)
    return pos


def find(pos, text):
    return next(m for m in pos.legal_moves() if m.uci(pos.is_chess960()) == text)


def test_start_fen_round_trip():
    assert Position().fen() == START_FEN


def test_start_position_move_count():
    assert len(Position().legal_moves()) == 20


@pytest.mark.parametrize("fen", [
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
])
def test_do_undo_restores_every_move(fen):
    pos = Position().set(fen)
    key = pos.key()
    for move in pos.legal_moves():
        pos.do_move(move)
        assert pos.is_ok()
        pos.undo_move(move)
        assert pos.fen() == fen
        assert pos.key() == key


def test_repetition_by_knight_shuffle():
    pos = Position()
    start_key = pos.key()
    play(pos, "g1f3", "g8f6", "f3g1")
    assert pos.upcoming_repetition(4)
    play(pos, "f6g8")
    assert pos.key() == start_key
    assert pos.is_repetition(5)
    assert pos.is_draw(5)
    assert pos.has_repeated()


def test_castling_moves_king_and_rook():
    pos = Position().set("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    move = find(pos, "e1g1")
    pos.do_move(move)
    assert pos.piece_on(parse_square("g1")) == Piece.W_KING
    assert pos.piece_on(parse_square("f1")) == Piece.W_ROOK
    assert pos.fen().split()[2] == "kq"
    pos.undo_move(move)
    assert pos.fen() == "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


def test_en_passant_square_dropped_when_not_capturable():
    pos = Position().set("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    assert pos.fen().split()[3] == "-"


def test_en_passant_capture():
    pos = Position().set("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
    move = find(pos, "e5d6")
    assert pos.capture(move)
    pos.do_move(move)
    assert pos.piece_on(parse_square("d5")) == Piece.NO_PIECE
    assert pos.captured_piece() == Piece.B_PAWN


def test_fools_mate_has_no_legal_moves():
    pos = play(Position(), "f2f3", "e7e5", "g2g4", "d8h4")
    assert pos.checkers()
    assert pos.legal_moves() == []


def test_gives_check_matches_checkers():
    pos = Position()
    for move in pos.legal_moves():
        given = pos.gives_check(move)
        pos.do_move(move)
        assert bool(pos.checkers()) == given
        pos.undo_move(move)


def test_flip_twice_is_identity():
    fen = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
    pos = Position().set(fen)
    pos.flip()
    assert pos.side_to_move() == BLACK
    pos.flip()
    assert pos.fen() == fen


def test_null_move_round_trip():
    pos = Position()
    key = pos.key()
    pos.do_null_move()
    assert pos.side_to_move() == BLACK
    assert pos.key() != key
    pos.undo_null_move()
    assert pos.key() == key


def test_null_move_in_check_rejected():
    pos = play(Position(), "f2f3", "e7e5", "g2g4", "d8h4")
    with pytest.raises(ValueError):
        pos.do_null_move()


def test_pseudo_legal():
    pos = Position()
    assert pos.pseudo_legal(Move.make(parse_square("e2"), parse_square("e4")))
    assert not pos.pseudo_legal(Move.make(parse_square("e2"), parse_square("e5")))


def test_set_endgame():
    pos = Position().set_endgame("KBPKN", WHITE)
    assert pos.fen() == "8/kn6/8/8/8/8/KBP5/8 w - - 0 10"


def test_material_key_depends_only_on_material():
    a = Position().set("8/8/8/4k3/8/8/8/KR6 w - - 0 1")
    b = Position().set("7R/8/8/8/k7/8/8/7K b - - 0 1")
    assert a.material_key() == b.material_key()
    assert a.count(PieceType.ROOK) == 1


def test_missing_king_raises():
    with pytest.raises(ValueError):
        Position().set("8/8/8/8/8/8/8/8 w - - 0 1")


def test_str_contains_fen():
    pos = Position()
    assert "Fen: " + START_FEN in str(pos)