import pytest

from salvo.battleship import Board, CellState, index_of
from salvo.player import PlayerKind, PlayerQuit, ShotResult, Side, fire_at, next_shot


def _sides():
    attacker = Side("a")
    defender = Side.with_board("d", PlayerKind.HUMAN, Board.from_cells("SS" + "~" * 98))
    return attacker, defender


def test_with_board_counts_capacity():
    _, defender = _sides()
    assert defender.capacity == 2
    assert not defender.defeated


def test_hit_writes_both_boards_and_drops_capacity():
    attacker, defender = _sides()
    assert fire_at(attacker, defender, 0) is ShotResult.HIT
    assert defender.own_board[0] is CellState.HIT
    assert attacker.op_board[0] is CellState.HIT
    assert defender.capacity == 1


def test_miss_writes_both_boards():
    attacker, defender = _sides()
    assert fire_at(attacker, defender, 50) is ShotResult.MISS
    assert defender.own_board[50] is CellState.MISS
    assert attacker.op_board[50] is CellState.MISS
    assert defender.capacity == 2


def test_retargeting_a_resolved_cell_changes_nothing():
    attacker, defender = _sides()
    fire_at(attacker, defender, 0)
    fire_at(attacker, defender, 50)
    own, view = defender.own_board.cells(), attacker.op_board.cells()
    assert fire_at(attacker, defender, 0) is ShotResult.ALREADY_RESOLVED
    assert fire_at(attacker, defender, 50) is ShotResult.ALREADY_RESOLVED
    assert defender.own_board.cells() == own
    assert attacker.op_board.cells() == view
    assert defender.capacity == 1


def test_defeat_at_zero_capacity():
    attacker, defender = _sides()
    fire_at(attacker, defender, 0)
    fire_at(attacker, defender, 1)
    assert defender.defeated


def test_record_incoming_only_counts_real_hits():
    side = Side.with_board("c", PlayerKind.HUMAN, Board.from_cells("S" + "~" * 99))
    side.record_incoming(0, True)
    side.record_incoming(0, True)
    side.record_incoming(5, False)
    assert side.capacity == 0
    assert side.own_board[0] is CellState.HIT
    assert side.own_board[5] is CellState.MISS


def test_automated_kinds_get_a_selector():
    assert Side("h").selector is None
    assert Side("r", PlayerKind.RANDOM_AI).selector is not None
    assert PlayerKind.HUNT_AI.automated


def test_human_prompt_rejects_garbage_and_resolved_cells(scripted_console):
    side = Side("alice")
    side.op_board[index_of("C3")] = CellState.MISS
    console = scripted_console(["K1", "C3", "3c", "c4"])
    assert next_shot(side, console) == index_of("C4")
    assert any(line.startswith("Invalid coordinate!") for line in console.output)
    assert sum(line.startswith("Already fired at C3") for line in console.output) == 2


def test_human_quit(scripted_console):
    with pytest.raises(PlayerQuit):
        next_shot(Side("alice"), scripted_console(["quit"]))
    with pytest.raises(PlayerQuit):
        next_shot(Side("alice"), scripted_console([]))
