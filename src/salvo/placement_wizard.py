# placement_wizard.py
"""
Interactive ship placement for a human player.
Usage:
    run(side, console)
Places the whole fleet on side.own_board, or raises PlayerQuit when the player
types 'quit' or closes their input.
"""

import logging
import random
from typing import Optional

from .battleship import Orientation, fleet_ships
from .commands import CommandParseError, QuitCommand, parse_coord, parse_orientation
from .console import Console
from .placement import (
    PlacementDeadEnd,
    can_place,
    has_room,
    is_legal,
    mark_ship,
    place_fleet_randomly,
    reset_side,
)
from .player import PlayerQuit, Side

logger = logging.getLogger(__name__)


def _read(console: Console, prompt: str) -> str:
    try:
        return console.read_line(prompt)
    except EOFError:
        raise PlayerQuit("input closed") from None


def _ask_origin(side: Side, console: Console) -> int:
    while True:
        try:
            cmd = parse_coord(_read(console, "Origin: "))
        except CommandParseError as e:
            console.show(f"Invalid input, again please. ({e})")
            continue
        if isinstance(cmd, QuitCommand):
            raise PlayerQuit("player quit during placement")
        if not is_legal(side.own_board, cmd.index, Orientation.NONE):
            console.show(f"{cmd.coord} is taken or touches another ship, again please.")
            continue
        return cmd.index


def _ask_orientation(console: Console) -> Orientation:
    console.show("Enter 'h' for a horizontal (rightwards) orientation of the ship, 'v' for a vertical (upwards) one.")
    while True:
        try:
            cmd = parse_orientation(_read(console, "Orientation [h/v]: "))
        except CommandParseError as e:
            console.show(f"Invalid input, again please. ({e})")
            continue
        if isinstance(cmd, QuitCommand):
            raise PlayerQuit("player quit during placement")
        return cmd.orientation


def _place_one(side: Side, console: Console, name: str, length: int) -> None:
    while True:
        if not has_room(side.own_board, length):
            raise PlacementDeadEnd(f"no room left for the {name}")
        console.show_boards(side.own_board, side.op_board)
        console.show(f"{side.name}, please enter the first coordinate for your {name} ({length} fields).")
        origin = _ask_origin(side, console)
        orientation = _ask_orientation(console)
        cells = can_place(side.own_board, origin, length, orientation)
        if cells is None:
            # The whole ship is rejected; start again from the origin prompt.
            console.show("Invalid position for this ship, please choose another coordinate.")
            continue
        mark_ship(side, cells)
        return


def run(side: Side, console: Console, *, ask_manual: bool = False, rng: Optional[random.Random] = None) -> None:
    # Optionally let the player hand placement over to the computer
    if ask_manual:
        pref = _read(console, "Place your ships manually? [Y/n] ").strip().upper()
        if pref.startswith("N"):
            place_fleet_randomly(side, rng)
            console.show_boards(side.own_board, side.op_board)
            return

    reset_side(side)
    while True:
        try:
            for name, length in fleet_ships():
                _place_one(side, console, name, length)
        except PlacementDeadEnd as exc:
            logger.info("manual placement dead end for %s: %s", side.name, exc)
            console.show("No suitable position left, please restart the ship placement.")
            reset_side(side)
            continue
        break

    # Final board
    console.show_boards(side.own_board, side.op_board)
    console.show("All ships placed, waiting for your opponent...")
