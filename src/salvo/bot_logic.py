from __future__ import annotations

import enum
import random
from typing import List, Optional, Set

from .battleship import Board, CellState
from .config import BOARD_SIZE
from .coord_utils import CELL_COUNT, to_rowcol


class SelectorMode(enum.Enum):
    RANDOM = "random"
    HUNT = "hunt"


def _orthogonal(index: int) -> List[int]:
    """In-bounds neighbours of *index* in the order left, right, up, down."""
    row, col = to_rowcol(index)
    out = []
    if col > 0:
        out.append(index - 1)
    if col < BOARD_SIZE - 1:
        out.append(index + 1)
    if row > 0:
        out.append(index - BOARD_SIZE)
    if row < BOARD_SIZE - 1:
        out.append(index + BOARD_SIZE)
    return out


class TargetSelector:
    """
    Shot selection for the automated opponent
    -----------------------------------------
    1. Random: draw uniformly from the cells that have never been fired at.
    2. Hunt: scan the opponent view row by row for a HIT that still has an
       untried orthogonal neighbour and fire there (left, right, up, down).
       With no such hit on the board, fall back to a random draw.

    The selector remembers every cell it returned, so no cell is chosen twice
    in one game.
    """

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def __init__(
        self,
        mode: SelectorMode | str = SelectorMode.HUNT,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.mode = SelectorMode(mode)
        self._rng = rng or random.Random(seed)
        # Cells still worth drawing from; shrinks as shots resolve.
        self.candidates: List[int] = list(range(CELL_COUNT))
        self.fired: Set[int] = set()

    # ------------------------------------------------------------------ #
    # Shot selection
    # ------------------------------------------------------------------ #
    def choose_shot(self, view: Board) -> int:
        """Pick the next cell to fire at, given the attacker's opponent view."""
        self._discard_resolved(view)
        if self.mode is SelectorMode.HUNT:
            target = self._hunt(view)
            if target is not None:
                self.register(target)
                return target
        return self._draw()

    def register(self, index: int) -> None:
        """Record *index* as fired upon."""
        self.fired.add(index)
        if index in self.candidates:
            self.candidates.remove(index)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _discard_resolved(self, view: Board) -> None:
        self.candidates = [i for i in self.candidates if view[i] is CellState.WATER]

    def _hunt(self, view: Board) -> Optional[int]:
        for index, cell in enumerate(view):
            if cell is not CellState.HIT:
                continue
            for nbr in _orthogonal(index):
                if view[nbr] is CellState.WATER and nbr not in self.fired:
                    return nbr
        return None

    def _draw(self) -> int:
        while self.candidates:
            index = self._rng.choice(self.candidates)
            self.candidates.remove(index)
            if index in self.fired:
                continue  # redraw
            self.fired.add(index)
            return index
        raise RuntimeError("every cell has already been fired at")
