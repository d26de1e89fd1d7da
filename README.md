# chesscore

A pure-Python chess position core with no third-party dependencies.

## Modules

- `chesscore.types`: `Color`, `PieceType`, `Piece`, `MoveType`, `CastlingRights` and the
  16-bit `Move` (with `Move.make`, `Move.none`, `Move.null` and `Move.uci`), plus square and
  value helpers such as `make_piece`, `color_of`, `type_of`, `make_square`, `square_name`,
  `parse_square`, `is_win`, `is_loss`, `is_decisive`, `mate_in` and `mated_in`.
- `chesscore.bitboards`: bitboard helpers on Python integers (`square_bb`, `popcount`,
  `lsb`, `iter_squares`, `more_than_one`) and attack tables (`attacks_bb`,
  `pawn_attacks_bb`, `between_bb`, `line_bb`).
- `chesscore.zobrist`: the xorshift `PRNG`, the `Zobrist` key tables, `make_key`, and a
  `CuckooTable` of reversible piece moves used for repetition detection.
- `chesscore.score`: the score kinds `Mate`, `Tablebase` and `InternalUnits`, and
  `score_from_value`, which classifies a search value (the caller supplies the
  centipawn conversion).
- `chesscore.position`: the `Position` class, with `StateInfo` and `DirtyPiece`.
- `chesscore.rootmove`: search bookkeeping records: `NodeType`, `Stack`, `RootMove`
  (sorts best score first), `LimitsType`, `Skill`, `InfoShort`, `InfoFull` and
  `InfoIteration`.

## Position

A new `Position()` holds the standard starting position. `set(fen, chess960)` reads FEN,
including Shredder-FEN and X-FEN castling letters; an en passant square is kept only when
a capture on it is actually possible. `set_endgame(code, color)` builds a position from
a code such as `"KBPKN"`. `fen()` writes the position back, and `str(pos)` draws an
ASCII board with the FEN, the hash key and the checking pieces.

It also offers:

- `legal_moves()`, `legal`, `pseudo_legal`, `gives_check`, `capture`, `capture_stage`;
- `do_move`, `undo_move`, `do_null_move`, `undo_null_move`, with incremental hash keys
  (`key`, `pawn_key`, `material_key`, `minor_piece_key`, `non_pawn_key`);
- static exchange evaluation with `see_ge(move, threshold)`;
- `is_draw` (fifty-move rule and repetition; stalemate is not detected),
  `is_repetition`, `has_repeated` and `upcoming_repetition`;
- `flip()` to swap the colours, and `is_ok()` for consistency checks.

In Chess960 and in the move encoding, castling is stored as "king takes own rook";
`Move.uci(False)` prints it as the usual king move.

## Example

```python
from chesscore.position import Position

pos = Position()
pos.set("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1", False)

for move in pos.legal_moves():
    print(move.uci(pos.is_chess960()))

move = next(m for m in pos.legal_moves() if m.uci(False) == "e2e4")
pos.do_move(move, pos.gives_check(move))
print(pos.fen())   # rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1
pos.undo_move(move)

print(pos)         # ASCII board, FEN, key and checkers
```

Scores:

```python
from chesscore.score import Mate, score_from_value
from chesscore.types import mate_in

assert score_from_value(mate_in(3), lambda v: v) == Mate(3)
```

## What it does not do

The package has no search, no evaluation function, no endgame tablebase probing and no
engine protocol or command-line program. `chesscore.rootmove` provides only the data
records a search would keep; it does not search.

## Installation and tests

```
pip install .[test]
pytest
```