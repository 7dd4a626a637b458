# banqi

Chinese Dark Chess (Banqi) on a 4×8 board: board rules, bitboard move
generation, an alpha-beta search engine with chance nodes for flips, and a
small line-based referee program.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The referee

`banqi-referee` reads commands from standard input, one per line, and
answers on standard output until `QUIT` or the end of input:

| Command            | Effect                                                        |
|--------------------|---------------------------------------------------------------|
| `START <hidden>`   | New game; a non-zero number keeps all 32 pieces face down, `0` flips them all. |
| `STATE`            | Prints `IN-PLAY`, `RED WINS`, `BLACK WINS` or `DRAW`, then the FEN, and for a finished game a line saying how it ended. |
| `MOVE <from> <to>` | Moves a piece, e.g. `MOVE A1 A2`.                              |
| `FLIP <square>`    | Turns a face-down piece over, e.g. `FLIP D2`.                  |
| `QUIT`             | Prints `BYE` and exits.                                        |

Each command that is carried out is answered with `OK`; malformed or
unknown commands get a line starting with `ERR`. A well-formed `MOVE`
that breaks the rules is still answered with `OK`: it is not played, but
it is recorded, and the next `STATE` reports the other side as the winner
by illegal move.

The `--seed N` option makes the pieces revealed by flips reproducible.

```
$ banqi-referee --seed 3
START 1
OK
FLIP D2
OK
STATE
IN-PLAY
????????/????????/????????/???????? b
OK
QUIT
BYE
```

(The FEN line shows whatever piece the flip revealed.) Squares are named
by file `A`–`H` and rank `1`–`4`. The referee can also be run with
`python -m banqi.referee`.

## Using the library

```python
import random

from banqi.position import Position
from banqi.movegen import MoveList
from banqi.helper import strategy_random
from banqi.types import Move

pos = Position(rng=random.Random(7))
pos.add_collection()
pos.setup(hidden=True)

pos.do_move(Move.parse("FLIP D2"))
print(pos.to_fen())
print(pos.render())

moves = MoveList(pos)
print(len(moves), [str(m) for m in moves])

rng = random.Random(1)
result = pos.simulate(lambda ml: strategy_random(ml, rng))  # 1, 0 or -1
```

`Position.outcome()` returns the winner (`Color.MYSTERY` for a draw,
`Color.NO_COLOR` while the game goes on) and a `WinCon` saying how it
ended. `undo_move()` takes back the last move, and `pieces()`,
`pieces_of()` and `count()` query the bitboards. A position can also be
built from a FEN-like string: `Position("... r")`.

### Engine

```python
from banqi.engine import AlphaBetaEngine
from banqi.material import generate_eval_table

engine = AlphaBetaEngine(material_table=generate_eval_table(), time_limit_ms=1000)
best = engine.search(pos)
```

Without a `material_table`, the engine reads `material_scores.bin` from
the current directory; if that file is missing or malformed it logs an
error and uses a table of zeros. Such a file can be written with:

```python
from banqi.material import generate_eval_table, save_table

save_table(generate_eval_table(), "material_scores.bin")
```

`banqi.material` also builds an alternative piece-score table
(`generate_piece_score_table`) and reads tables back with `load_table`.

### Building blocks

- `banqi.types`: colours, piece types, pieces, moves, squares and the
  capture rule.
- `banqi.bitboard`: 32-bit boards, cannon attack tables and `attacks_bb`.
- `banqi.movegen`: `MoveList` and the generation functions behind it.
- `banqi.helper`: `squares_sorted` and `strategy_random`.
- `banqi.zobrist` and `banqi.transposition`: position hashing and the
  transposition table the engine uses.

## What it does not do

- There is no command that runs the engine as a player; `AlphaBetaEngine`
  is used from Python only.
- The referee keeps no clocks: it does not time players or enforce time
  limits.
- `WinCon` names insufficient material and threefold repetition, but
  `Position.outcome()` never reports either; games end by elimination,
  no legal moves, an illegal move, or 30 moves without a capture.