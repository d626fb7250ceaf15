# io_utils.py
"""
Low-level helpers shared by the sessions and the entry points
–––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––
• Connection      – one framed message channel over a socket, shared by the
                    session thread and the interrupt handler
• load_board()    – read a fleet layout from a text file ('X' ship, '-' water)
"""

from __future__ import annotations

import contextlib
import logging
import socket
import threading
from pathlib import Path
from typing import Optional

from .battleship import Board, CellState
from .common import FrameError, recv_pkt, send_pkt
from .coord_utils import CELL_COUNT
from .messages import Message, Quit, decode, encode

logger = logging.getLogger(__name__)


class ConnectionDropped(Exception):
    """The peer went away, a frame could not be decoded, or a receive timed out."""


class Connection:
    """
    Framed, sequenced message channel over a connected socket.

    ``send`` is serialised by a lock so that the interrupt path may call
    ``send_quit`` while the session thread is mid-send. ``shutdown`` wakes a
    receive blocked in another thread; that receive then raises
    :class:`ConnectionDropped`.
    """

    def __init__(self, sock: socket.socket, *, timeout: Optional[float] = None) -> None:
        self._sock = sock
        if timeout:
            sock.settimeout(timeout)
        self._r = sock.makefile("rb")
        self._w = sock.makefile("wb")
        self._lock = threading.Lock()
        self._seq = 0

    def send(self, msg: Message) -> None:
        kind, obj = encode(msg)
        with self._lock:
            try:
                send_pkt(self._w, kind, self._seq, obj)
            except (OSError, ValueError) as exc:  # ValueError: file already closed
                raise ConnectionDropped(f"send failed: {exc}") from exc
            self._seq += 1

    def recv(self) -> Message:
        try:
            kind, _seq, obj = recv_pkt(self._r)
            return decode(kind, obj)
        except FrameError as exc:
            raise ConnectionDropped(str(exc)) from exc
        except (OSError, ValueError) as exc:  # socket.timeout is an OSError
            raise ConnectionDropped(f"receive failed: {exc}") from exc

    def send_quit(self) -> None:
        """Best-effort Quit, used on the way out."""
        try:
            self.send(Quit())
        except ConnectionDropped as exc:
            logger.debug("could not send Quit: %s", exc)

    def shutdown(self) -> None:
        with contextlib.suppress(OSError):
            self._sock.shutdown(socket.SHUT_RDWR)

    def close(self) -> None:
        for f in (self._w, self._r):
            with contextlib.suppress(OSError, ValueError):
                f.close()
        with contextlib.suppress(OSError):
            self._sock.close()


def load_board(path: str | Path) -> Board:
    """
    Read a board from *path*: 'X' is a ship cell, '-' is water, lines starting
    with '#' are comments and every other character is ignored.

    A file that cannot be read, or that does not describe exactly 100 cells,
    yields an all-water board so the caller falls back to placing ships.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("cannot read board file %s (%s); using an empty board", path, exc)
        return Board()

    cells: list[CellState] = []
    for line in text.splitlines():
        if line.startswith("#"):
            continue
        for ch in line:
            if ch == "X":
                cells.append(CellState.SHIP)
            elif ch == "-":
                cells.append(CellState.WATER)

    if len(cells) != CELL_COUNT:
        logger.warning("board file %s holds %d cells, expected %d; using an empty board", path, len(cells), CELL_COUNT)
        return Board()
    logger.info("loaded board from %s", path)
    return Board.from_cells(cells)
