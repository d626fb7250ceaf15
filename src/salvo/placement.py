"""Ship placement: the legality check and the automated placer.

Ships must not touch each other, not even diagonally. A ship grows from its
origin one segment at a time, upwards when vertical and rightwards when
horizontal; every segment is checked against the Moore neighbourhood of the
cell it lands on, minus the segment it grew from.

The automated placer draws random origins and gives up on a ship once every
origin has been tried (a *dead end*); the fleet is then cleared and placed again
from the first ship.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from .battleship import Board, CellState, Orientation, fleet_ships
from .config import BOARD_SIZE
from .coord_utils import CELL_COUNT, to_index, to_rowcol
from .player import Side

logger = logging.getLogger(__name__)


class PlacementDeadEnd(Exception):
    """Raised when no origin is left from which the next ship could be placed."""


def _moore(index: int) -> Tuple[int, ...]:
    row, col = to_rowcol(index)
    cells = []
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            r, c = row + dr, col + dc
            if (dr or dc) and 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE:
                cells.append(to_index(r, c))
    return tuple(cells)


# Off-board neighbours are simply absent, so edge cells check fewer cells.
_NEIGHBOURS: List[Tuple[int, ...]] = [_moore(i) for i in range(CELL_COUNT)]


def _predecessor(index: int, orientation: Orientation) -> Optional[int]:
    """The segment *index* grew from, or None for an origin."""
    if orientation is Orientation.VERTICAL:
        return index + BOARD_SIZE
    if orientation is Orientation.HORIZONTAL:
        return index - 1
    return None


def is_legal(board: Board, index: int, orientation: Orientation = Orientation.NONE) -> bool:
    """Return True if a ship segment may occupy *index*."""
    if not 0 <= index < CELL_COUNT or board[index] is not CellState.WATER:
        return False
    skip = _predecessor(index, orientation)
    return all(board[n] is CellState.WATER for n in _NEIGHBOURS[index] if n != skip)


def next_segment(index: int, orientation: Orientation) -> Optional[int]:
    """Cell the ship grows into after *index*, or None if that leaves the grid."""
    row, col = to_rowcol(index)
    if orientation is Orientation.VERTICAL:
        return None if row == 0 else index - BOARD_SIZE
    if orientation is Orientation.HORIZONTAL:
        return None if col == BOARD_SIZE - 1 else index + 1
    raise ValueError("a ship needs a direction to grow")


def ship_cells(origin: int, length: int, orientation: Orientation) -> Optional[List[int]]:
    """All cells of a straight ship, or None if part of it would be off the grid."""
    cells = [origin]
    for _ in range(length - 1):
        nxt = next_segment(cells[-1], orientation)
        if nxt is None:
            return None
        cells.append(nxt)
    return cells


def can_place(board: Board, origin: int, length: int, orientation: Orientation) -> Optional[List[int]]:
    """Validate a whole ship segment by segment; return its cells if legal."""
    if not is_legal(board, origin, Orientation.NONE):
        return None
    cells = ship_cells(origin, length, orientation)
    if cells is None:
        return None
    for cell in cells[1:]:
        if not is_legal(board, cell, orientation):
            return None
    return cells


def has_room(board: Board, length: int) -> bool:
    """True if a ship of *length* fits anywhere, in either orientation."""
    return any(
        can_place(board, origin, length, orientation) is not None
        for origin in range(CELL_COUNT)
        for orientation in (Orientation.VERTICAL, Orientation.HORIZONTAL)
    )


def mark_ship(side: Side, cells: List[int]) -> None:
    for cell in cells:
        side.own_board[cell] = CellState.SHIP
    side.capacity += len(cells)


def reset_side(side: Side) -> None:
    """Clear a side's own board and zero its capacity."""
    side.own_board.reset()
    side.capacity = 0


def place_ship_randomly(side: Side, length: int, rng: random.Random) -> List[int]:
    """
    Place one ship of *length* at a random legal position.

    Origins that are illegal, or whose randomly chosen direction does not fit,
    are discarded for this ship. Raises PlacementDeadEnd once none are left.
    """
    candidates = list(range(CELL_COUNT))
    while candidates:
        origin = rng.choice(candidates)
        if not is_legal(side.own_board, origin, Orientation.NONE):
            candidates.remove(origin)
            continue
        orientation = rng.choice((Orientation.VERTICAL, Orientation.HORIZONTAL))
        cells = can_place(side.own_board, origin, length, orientation)
        if cells is None:
            candidates.remove(origin)
            continue
        mark_ship(side, cells)
        return cells
    raise PlacementDeadEnd(f"no room left for a ship of length {length}")


def place_fleet_randomly(side: Side, rng: Optional[random.Random] = None) -> int:
    """
    Place the whole fleet for an automated player.

    Starts from an empty board and restarts from scratch after every dead end.
    Returns the number of restarts it took.
    """
    rng = rng or random.Random()
    restarts = 0
    while True:
        reset_side(side)
        try:
            for _name, length in fleet_ships():
                place_ship_randomly(side, length, rng)
        except PlacementDeadEnd as exc:
            restarts += 1
            logger.debug("placement dead end for %s (%s), restart #%d", side.name, exc, restarts)
            continue
        logger.debug("fleet placed for %s after %d restart(s)", side.name, restarts)
        return restarts
