"""
battleship.py

Core data structures for the game board:
 - CellState, the four states a grid cell can be in
 - Board, a fixed 10x10 grid of cell states addressed by flat index
 - the fleet roster and aggregate board queries

Each player keeps two boards: their *own* board (where their ships are) and an
*opponent view* built only from the results of shots. The two are always
separate objects; shot resolution in ``player.fire_at`` writes both explicitly.
"""

from __future__ import annotations

import enum
from typing import Iterable, Iterator, List, Optional

from .config import BOARD_SIZE, FLEET
from .coord_utils import CELL_COUNT, index_of as _index_of

# Sum of length * count over the roster.
FLEET_CELLS = sum(length * count for _, length, count in FLEET)


class CellState(str, enum.Enum):
    """State of a single grid cell. HIT and MISS are terminal."""

    WATER = "~"
    SHIP = "S"
    HIT = "X"
    MISS = "o"

    @property
    def resolved(self) -> bool:
        """True once the cell has been fired upon."""
        return self in (CellState.HIT, CellState.MISS)


class Orientation(enum.Enum):
    """Direction a ship grows from its origin: up when vertical, right when horizontal."""

    NONE = "none"  # origin only, direction not known yet
    VERTICAL = "v"
    HORIZONTAL = "h"


class Board:
    """
    Represents one 10x10 board.

    Cells are stored row-major in a flat list so that ``board[i]`` with
    ``i = row * 10 + col`` addresses a cell (see ``coord_utils.to_index``).
    """

    def __init__(self, cells: Optional[Iterable[CellState | str]] = None):
        """Initialise an all-water board, or one holding *cells*."""
        self.size = BOARD_SIZE
        if cells is None:
            self._cells: List[CellState] = [CellState.WATER] * CELL_COUNT
            return
        cells = [CellState(c) for c in cells]
        if len(cells) != CELL_COUNT:
            raise ValueError(f"a board holds {CELL_COUNT} cells, got {len(cells)}")
        self._cells = cells

    @classmethod
    def from_cells(cls, cells: Iterable[CellState | str]) -> "Board":
        return cls(cells)

    def __getitem__(self, index: int) -> CellState:
        return self._cells[index]

    def __setitem__(self, index: int, state: CellState) -> None:
        self._cells[index] = CellState(state)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[CellState]:
        return iter(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"Board({''.join(c.value for c in self._cells)!r})"

    def cells(self) -> List[CellState]:
        """Return a copy of the cells, e.g. for transmission."""
        return list(self._cells)

    def rows(self) -> List[List[CellState]]:
        return [self._cells[r * self.size : (r + 1) * self.size] for r in range(self.size)]

    def reset(self) -> None:
        """Set every cell back to water."""
        self._cells = [CellState.WATER] * CELL_COUNT

    def ship_cell_count(self) -> int:
        """Number of cells still holding an unhit ship."""
        return sum(1 for c in self._cells if c is CellState.SHIP)

    def is_empty(self) -> bool:
        """True if no ship cell is left on the board."""
        return self.ship_cell_count() == 0


def ship_cell_count(board: Board) -> int:
    return board.ship_cell_count()


def is_empty(board: Board) -> bool:
    return board.is_empty()


def index_of(token: str) -> Optional[int]:
    """Translate a coordinate token like 'J9' or '9J' into a flat index (None if invalid)."""
    return _index_of(token)


def fleet_ships() -> List[tuple[str, int]]:
    """Expand the roster into one (name, length) entry per ship, in placement order."""
    return [(name, length) for name, length, count in FLEET for _ in range(count)]
