"""Terminal I/O for the human player: read a trimmed line, show text, draw boards."""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from .battleship import Board
from .config import BOARD_SIZE

_COLUMNS = [chr(ord("A") + c) for c in range(BOARD_SIZE)]


def render_boards(left: Board, right: Board, *, header_left: str, header_right: str) -> List[str]:
    """Lay two boards out side-by-side with centred headers.

    Row 9 is printed first, matching the coordinate grammar where the digit
    counts up from the bottom row.
    """
    column_header = "   " + " ".join(f"{c:>2}" for c in _COLUMNS)
    width = len(column_header)
    lines = [
        "",
        f"{f'[{header_left}]'.center(width)}   {f'[{header_right}]'.center(width)}",
        f"{column_header}   {column_header}",
    ]
    left_rows, right_rows = left.rows(), right.rows()
    for r in range(BOARD_SIZE):
        label = str(BOARD_SIZE - 1 - r)
        lcells = " ".join(f"{c.value:>2}" for c in left_rows[r])
        rcells = " ".join(f"{c.value:>2}" for c in right_rows[r])
        lines.append(f"{label:2} {lcells}   {label:2} {rcells}")
    lines.append("")
    return lines


class Console:
    """Reads player input and prints game output on a pair of text streams."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout

    def read_line(self, prompt: str = ">> ") -> str:
        """Prompt and return one trimmed line. Raises EOFError when input is closed."""
        self._out.write(prompt)
        self._out.flush()
        line = self._in.readline()
        if not line:
            raise EOFError("input closed")
        return line.strip()

    def show(self, text: str) -> None:
        print(text, file=self._out, flush=True)

    def show_boards(self, own: Board, opponent: Board) -> None:
        for line in render_boards(own, opponent, header_left="Your Fleet", header_right="Opponent"):
            self.show(line)


class SilentConsole(Console):
    """Console for automated players: output is dropped, input is never available."""

    def read_line(self, prompt: str = ">> ") -> str:
        raise EOFError("automated players have no input")

    def show(self, text: str) -> None:
        pass

    def show_boards(self, own: Board, opponent: Board) -> None:
        pass
