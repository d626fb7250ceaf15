import random

import pytest

from salvo.battleship import Board, CellState, Orientation, index_of
from salvo.placement import (
    PlacementDeadEnd,
    can_place,
    has_room,
    is_legal,
    mark_ship,
    next_segment,
    place_fleet_randomly,
    place_ship_randomly,
    reset_side,
    ship_cells,
)
from salvo.player import PlayerKind, Side


def _ships(board: Board) -> list[list[int]]:
    """Group ship cells into 8-connected components."""
    seen: set[int] = set()
    groups = []
    for start in range(100):
        if board[start] is not CellState.SHIP or start in seen:
            continue
        stack, group = [start], []
        seen.add(start)
        while stack:
            cell = stack.pop()
            group.append(cell)
            r, c = divmod(cell, 10)
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    nr, nc = r + dr, c + dc
                    n = nr * 10 + nc
                    if 0 <= nr < 10 and 0 <= nc < 10 and n not in seen and board[n] is CellState.SHIP:
                        seen.add(n)
                        stack.append(n)
        groups.append(sorted(group))
    return groups


def test_empty_board_is_legal_everywhere():
    board = Board()
    assert all(is_legal(board, i) for i in range(100))


def test_diagonal_contact_is_illegal():
    board = Board()
    board[index_of("B8")] = CellState.SHIP
    assert not is_legal(board, index_of("A9"))
    assert not is_legal(board, index_of("C7"))
    assert not is_legal(board, index_of("B8"))
    assert is_legal(board, index_of("D6"))


def test_predecessor_is_ignored_when_growing():
    board = Board()
    board[index_of("A0")] = CellState.SHIP
    # A1 grows upwards out of A0
    assert is_legal(board, index_of("A1"), Orientation.VERTICAL)
    assert not is_legal(board, index_of("A1"), Orientation.NONE)
    board2 = Board()
    board2[index_of("C4")] = CellState.SHIP
    assert is_legal(board2, index_of("D4"), Orientation.HORIZONTAL)
    assert not is_legal(board2, index_of("D4"), Orientation.VERTICAL)


def test_segments_never_leave_the_grid():
    assert next_segment(index_of("E9"), Orientation.VERTICAL) is None
    assert next_segment(index_of("J3"), Orientation.HORIZONTAL) is None
    assert ship_cells(index_of("A0"), 5, Orientation.VERTICAL) == [90, 80, 70, 60, 50]
    assert ship_cells(index_of("A8"), 3, Orientation.VERTICAL) is None
    assert ship_cells(index_of("H2"), 4, Orientation.HORIZONTAL) is None
    with pytest.raises(ValueError):
        next_segment(0, Orientation.NONE)


def test_can_place_returns_cells():
    board = Board()
    assert can_place(board, index_of("A9"), 2, Orientation.HORIZONTAL) == [0, 1]
    mark = Side("p")
    mark_ship(mark, [0, 1])
    assert mark.capacity == 2
    assert can_place(mark.own_board, index_of("C9"), 2, Orientation.HORIZONTAL) is None
    assert can_place(mark.own_board, index_of("D9"), 2, Orientation.HORIZONTAL) == [3, 4]


def test_random_fleet_is_complete_and_never_touches():
    side = Side("bot")
    place_fleet_randomly(side, random.Random(7))
    assert side.capacity == 30
    assert side.own_board.ship_cell_count() == 30
    groups = _ships(side.own_board)
    for group in groups:
        rows = {cell // 10 for cell in group}
        cols = {cell % 10 for cell in group}
        assert len(rows) == 1 or len(cols) == 1
    assert sorted(len(g) for g in groups) == [2, 2, 2, 2, 3, 3, 3, 4, 4, 5]


def test_random_fleet_is_reproducible_with_a_seed():
    a, b = Side("a"), Side("b")
    place_fleet_randomly(a, random.Random(99))
    place_fleet_randomly(b, random.Random(99))
    assert a.own_board == b.own_board


def test_starved_placement_reports_dead_end():
    # Every other row is solid ship: no water cell has an all-water neighbourhood.
    cells = []
    for row in range(10):
        cells.extend([CellState.SHIP if row % 2 == 0 else CellState.WATER] * 10)
    side = Side.with_board("starved", PlayerKind.HUMAN, Board.from_cells(cells))
    before = side.own_board.cells()
    assert not has_room(side.own_board, 2)
    with pytest.raises(PlacementDeadEnd):
        place_ship_randomly(side, 2, random.Random(0))
    assert side.own_board.cells() == before
    assert side.capacity == 50


def _crowded_cells() -> list[CellState]:
    """Ship everywhere except an L of water whose corner is A3 (index 60)."""
    cells = [CellState.SHIP] * 100
    for row in range(10):
        for col in range(10):
            if (1 <= row <= 7 and col <= 1) or (5 <= row <= 7 and col <= 5):
                cells[row * 10 + col] = CellState.WATER
    return cells


def test_nearly_full_board_has_one_origin_for_a_five_cell_ship():
    board = Board.from_cells(_crowded_cells())
    slots = [
        (origin, orientation)
        for origin in range(100)
        for orientation in (Orientation.VERTICAL, Orientation.HORIZONTAL)
        if can_place(board, origin, 5, orientation) is not None
    ]
    assert slots == [(60, Orientation.VERTICAL), (60, Orientation.HORIZONTAL)]
    assert not has_room(board, 6)


@pytest.mark.parametrize("seed", range(5))
def test_nearly_full_board_places_into_the_only_slot(seed):
    side = Side.with_board("crowded", PlayerKind.HUMAN, Board.from_cells(_crowded_cells()))
    water_before = side.own_board.cells().count(CellState.WATER)
    cells = place_ship_randomly(side, 5, random.Random(seed))
    assert cells in ([60, 50, 40, 30, 20], [60, 61, 62, 63, 64])
    assert side.capacity == side.own_board.ship_cell_count()
    assert side.own_board.cells().count(CellState.WATER) == water_before - 5


def test_reset_side():
    side = Side("p")
    place_fleet_randomly(side, random.Random(1))
    reset_side(side)
    assert side.capacity == 0
    assert side.own_board.is_empty()
