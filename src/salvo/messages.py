"""The closed set of messages exchanged by host and client.

Each message is a frozen dataclass. :func:`encode` turns one into the
``(MessageKind, payload)`` pair the frame layer writes, :func:`decode` does the
reverse and validates every field, raising :class:`~salvo.common.FrameError`
for anything a well-behaved peer would never send.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple, Type, Union

from . import battleship
from .battleship import CellState
from .common import FrameError, MessageKind
from .coord_utils import CELL_COUNT


@dataclass(frozen=True)
class Welcome:
    text: str
    host_name: str


@dataclass(frozen=True)
class Login:
    name: str


@dataclass(frozen=True)
class Ping:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class RequestBoard:
    pass


@dataclass(frozen=True)
class Board:
    """A complete fleet layout, one cell state per index."""

    cells: Tuple[CellState, ...]

    @classmethod
    def of(cls, board: battleship.Board) -> "Board":
        return cls(tuple(board.cells()))

    def to_board(self) -> battleship.Board:
        return battleship.Board.from_cells(self.cells)


@dataclass(frozen=True)
class RequestCoord:
    pass


@dataclass(frozen=True)
class Shoot:
    coord: str


@dataclass(frozen=True)
class Hit:
    index: int


@dataclass(frozen=True)
class Miss:
    index: int


@dataclass(frozen=True)
class TurnHost:
    pass


@dataclass(frozen=True)
class Won:
    pass


@dataclass(frozen=True)
class Lost:
    pass


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Unexpected:
    pass


Message = Union[
    Welcome, Login, Ping, Quit, RequestBoard, Board, RequestCoord, Shoot, Hit, Miss, TurnHost, Won, Lost, Text, Unexpected
]

_KINDS: Dict[Type[Any], MessageKind] = {
    Welcome: MessageKind.WELCOME,
    Login: MessageKind.LOGIN,
    Ping: MessageKind.PING,
    Quit: MessageKind.QUIT,
    RequestBoard: MessageKind.REQUEST_BOARD,
    Board: MessageKind.BOARD,
    RequestCoord: MessageKind.REQUEST_COORD,
    Shoot: MessageKind.SHOOT,
    Hit: MessageKind.HIT,
    Miss: MessageKind.MISS,
    TurnHost: MessageKind.TURN_HOST,
    Won: MessageKind.WON,
    Lost: MessageKind.LOST,
    Text: MessageKind.TEXT,
    Unexpected: MessageKind.UNEXPECTED,
}


def encode(msg: Message) -> Tuple[MessageKind, Dict[str, Any]]:
    kind = _KINDS[type(msg)]
    if isinstance(msg, Welcome):
        return kind, {"text": msg.text, "host_name": msg.host_name}
    if isinstance(msg, Login):
        return kind, {"name": msg.name}
    if isinstance(msg, Board):
        return kind, {"cells": "".join(c.value for c in msg.cells)}
    if isinstance(msg, Shoot):
        return kind, {"coord": msg.coord}
    if isinstance(msg, (Hit, Miss)):
        return kind, {"index": msg.index}
    if isinstance(msg, Text):
        return kind, {"text": msg.text}
    return kind, {}


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _str(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise FrameError(f"field {key!r} must be a string")
    return value


def _index(obj: Dict[str, Any]) -> int:
    value = obj.get("index")
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value < CELL_COUNT:
        raise FrameError(f"index out of range: {value!r}")
    return value


def _cells(obj: Dict[str, Any]) -> Tuple[CellState, ...]:
    raw = _str(obj, "cells")
    if len(raw) != CELL_COUNT:
        raise FrameError(f"board must hold {CELL_COUNT} cells, got {len(raw)}")
    try:
        return tuple(CellState(c) for c in raw)
    except ValueError as exc:
        raise FrameError(f"invalid cell symbol: {exc}") from None


_DECODERS: Dict[MessageKind, Callable[[Dict[str, Any]], Message]] = {
    MessageKind.WELCOME: lambda o: Welcome(_str(o, "text"), _str(o, "host_name")),
    MessageKind.LOGIN: lambda o: Login(_str(o, "name")),
    MessageKind.PING: lambda o: Ping(),
    MessageKind.QUIT: lambda o: Quit(),
    MessageKind.REQUEST_BOARD: lambda o: RequestBoard(),
    MessageKind.BOARD: lambda o: Board(_cells(o)),
    MessageKind.REQUEST_COORD: lambda o: RequestCoord(),
    MessageKind.SHOOT: lambda o: Shoot(_str(o, "coord")),
    MessageKind.HIT: lambda o: Hit(_index(o)),
    MessageKind.MISS: lambda o: Miss(_index(o)),
    MessageKind.TURN_HOST: lambda o: TurnHost(),
    MessageKind.WON: lambda o: Won(),
    MessageKind.LOST: lambda o: Lost(),
    MessageKind.TEXT: lambda o: Text(_str(o, "text")),
    MessageKind.UNEXPECTED: lambda o: Unexpected(),
}


def decode(kind: MessageKind, obj: Dict[str, Any]) -> Message:
    return _DECODERS[kind](obj)
