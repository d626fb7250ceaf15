"""Player sides, shot resolution and the per-kind choice of the next shot."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from .battleship import Board, CellState
from .bot_logic import SelectorMode, TargetSelector
from .commands import CommandParseError, QuitCommand, parse_coord
from .console import Console
from .coord_utils import format_coord

logger = logging.getLogger(__name__)


class PlayerKind(enum.Enum):
    HUMAN = "human"
    RANDOM_AI = "random"
    HUNT_AI = "hunt"

    @property
    def automated(self) -> bool:
        return self is not PlayerKind.HUMAN


class ShotResult(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    ALREADY_RESOLVED = "already_resolved"


class PlayerQuit(Exception):
    """Raised when the local player asks to leave the game."""


@dataclass
class Side:
    """
    One participant: their fleet, what they know of the opponent, and how many
    of their ship cells are still afloat (*capacity*).
    """

    name: str
    kind: PlayerKind = PlayerKind.HUMAN
    own_board: Board = field(default_factory=Board)
    op_board: Board = field(default_factory=Board)
    capacity: int = 0
    selector: Optional[TargetSelector] = None

    def __post_init__(self) -> None:
        if self.selector is None and self.kind.automated:
            self.selector = TargetSelector(SelectorMode(self.kind.value))

    @classmethod
    def with_board(cls, name: str, kind: PlayerKind, board: Board) -> "Side":
        """Create a side whose fleet is already laid out on *board*."""
        return cls(name=name, kind=kind, own_board=board, capacity=board.ship_cell_count())

    @property
    def defeated(self) -> bool:
        return self.capacity <= 0

    def record_shot(self, index: int, hit: bool) -> None:
        """Note the result of our own shot on the opponent view."""
        self.op_board[index] = CellState.HIT if hit else CellState.MISS
        if self.selector is not None:
            self.selector.register(index)

    def record_incoming(self, index: int, hit: bool) -> None:
        """Apply the opponent's shot, as reported by the host, to our own board."""
        if hit:
            if self.own_board[index] is CellState.SHIP:
                self.capacity -= 1
            self.own_board[index] = CellState.HIT
        elif self.own_board[index] is CellState.WATER:
            self.own_board[index] = CellState.MISS


def fire_at(attacker: Side, defender: Side, index: int) -> ShotResult:
    """
    Resolve *attacker*'s shot at *index* against *defender*.

    Both the defender's own board and the attacker's view are written. A cell
    that was already fired upon is left untouched.
    """
    target = defender.own_board[index]
    if target is CellState.SHIP:
        defender.own_board[index] = CellState.HIT
        attacker.op_board[index] = CellState.HIT
        defender.capacity -= 1
        return ShotResult.HIT
    if target is CellState.WATER:
        defender.own_board[index] = CellState.MISS
        attacker.op_board[index] = CellState.MISS
        return ShotResult.MISS
    return ShotResult.ALREADY_RESOLVED


def next_shot(side: Side, console: Console) -> int:
    """Produce *side*'s next target index, whatever kind of player it is."""
    if side.kind.automated:
        assert side.selector is not None
        index = side.selector.choose_shot(side.op_board)
        logger.debug("%s (%s) targets %s", side.name, side.kind.value, format_coord(index))
        return index
    return _prompt_shot(side, console)


def _prompt_shot(side: Side, console: Console) -> int:
    while True:
        try:
            line = console.read_line("Please enter a valid coordinate: ")
        except EOFError:
            raise PlayerQuit("input closed") from None
        try:
            cmd = parse_coord(line)
        except CommandParseError as e:
            console.show(f"Invalid coordinate! {e}")
            continue
        if isinstance(cmd, QuitCommand):
            raise PlayerQuit("player quit")
        if side.op_board[cmd.index].resolved:
            console.show(f"Already fired at {cmd.coord}, pick another cell.")
            continue
        return cmd.index
