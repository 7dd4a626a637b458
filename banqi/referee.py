"""Line-based referee that keeps a game position and answers text commands.

Commands, one per line:

* ``START <hidden>``  set up a new board (face-down unless ``hidden`` is 0)
* ``STATE``           report whether the game is still going, with the FEN
* ``MOVE <from> <to>`` or ``FLIP <square>``  play a move
* ``QUIT``            end the session
"""

from __future__ import annotations

import argparse
import random
import re
import sys
from typing import Sequence, TextIO

from .position import Position
from .types import Color, Move

_LEADING_INT = re.compile(r"[+-]?\d+")

_RESULT_HEADERS = {
    Color.RED: "RED WINS",
    Color.BLACK: "BLACK WINS",
    Color.MYSTERY: "DRAW",
}


class Referee:
    """Holds one game and turns command lines into response text."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng
        self.position: Position | None = None
        self.finished = False

    def handle(self, line: str) -> str:
        """Process one command line and return the text to send back."""
        tokens = line.split()
        command = tokens[0] if tokens else ""

        if command == "START":
            return self._start(tokens[1:])
        if command == "STATE":
            return self._state()
        if command in ("MOVE", "FLIP"):
            return self._move(line)
        if command == "QUIT":
            self.position = None
            self.finished = True
            return "BYE\n"
        return "ERR Unknown command\n"

    def _start(self, args: list[str]) -> str:
        match = _LEADING_INT.match(args[0]) if args else None
        if match is None:
            return "ERR Bad Command\n"
        hidden = int(match.group())
        pos = Position(rng=self.rng)
        pos.add_collection()
        pos.setup(bool(hidden))
        self.position = pos
        return "OK\n"

    def _state(self) -> str:
        pos = self.position
        if pos is None:
            return "ERR Run START first\n"
        winner, how = pos.outcome()
        fen = pos.to_fen()
        if winner == Color.NO_COLOR:
            return f"IN-PLAY\n{fen}\nOK\n"
        header = _RESULT_HEADERS[winner]
        reason = how.describe() if how is not None else ""
        return f"{header}\n{fen}\n{reason}\nOK\n"

    def _move(self, line: str) -> str:
        pos = self.position
        if pos is None:
            return "ERR Run START first\n"
        try:
            mv = Move.parse(line)
        except ValueError:
            return "ERR Invalid Move Format\n"
        pos.do_move(mv)
        return "OK\n"

    def serve(self, stdin: TextIO, stdout: TextIO) -> None:
        """Answer commands from `stdin` until QUIT or end of input."""
        for line in stdin:
            stdout.write(self.handle(line))
            stdout.flush()
            if self.finished:
                break


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="banqi-referee", description="Referee Chinese Dark Chess games over stdin/stdout."
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for revealing pieces")
    args = parser.parse_args(argv)
    rng = random.Random(args.seed) if args.seed is not None else None
    Referee(rng).serve(sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())