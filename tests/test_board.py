import pytest

from salvo import coord_utils
from salvo.battleship import FLEET_CELLS, Board, CellState, fleet_ships, index_of, is_empty, ship_cell_count
from salvo.coord_utils import format_coord, to_index, to_rowcol


def test_j9_and_9j_decode_to_index_9():
    assert index_of("J9") == 9
    assert index_of("9J") == 9


@pytest.mark.parametrize("token", ["K1", "A10", "", "AA", "99", "A", "J-1", "1 A"])
def test_garbage_tokens_are_invalid(token):
    assert index_of(token) is None


def test_tokens_are_trimmed_and_case_insensitive():
    assert index_of("  a9 ") == 0
    assert index_of("0a") == 90
    assert index_of("j0") == 99


@pytest.mark.parametrize("token", ["a9", " A9", "A9 ", "A9\n", "9a"])
def test_strict_tokens_must_be_exact_spellings(token):
    assert coord_utils.index_of(token, strict=True) is None


def test_strict_accepts_both_orders():
    assert coord_utils.index_of("J9", strict=True) == 9
    assert coord_utils.index_of("9J", strict=True) == 9


def test_every_index_has_exactly_one_letter_first_token():
    seen = set()
    for index in range(100):
        token = format_coord(index)
        assert index_of(token) == index
        assert index_of(token[::-1]) == index
        seen.add(token)
    assert len(seen) == 100


def test_digit_counts_rows_from_the_bottom():
    assert to_rowcol(index_of("A9")) == (0, 0)
    assert to_rowcol(index_of("A0")) == (9, 0)
    assert to_index(4, 3) == index_of("D5")


def test_new_board_is_all_water():
    board = Board()
    assert len(board) == 100
    assert all(cell is CellState.WATER for cell in board)
    assert is_empty(board)
    assert ship_cell_count(board) == 0


def test_from_cells_rejects_wrong_length():
    with pytest.raises(ValueError):
        Board.from_cells([CellState.WATER] * 99)


def test_from_cells_accepts_symbols():
    board = Board.from_cells("S" + "~" * 98 + "X")
    assert board[0] is CellState.SHIP
    assert board[to_index(9, 9)] is CellState.HIT
    assert board.ship_cell_count() == 1
    assert not board.is_empty()


def test_cells_returns_a_copy():
    board = Board()
    cells = board.cells()
    cells[0] = CellState.SHIP
    assert board[0] is CellState.WATER


def test_reset_clears_everything():
    board = Board.from_cells("S" * 100)
    board.reset()
    assert board == Board()


def test_fleet_roster():
    ships = fleet_ships()
    assert len(ships) == 10
    assert [length for _, length in ships] == [2, 2, 2, 2, 3, 3, 3, 4, 4, 5]
    assert FLEET_CELLS == 30
