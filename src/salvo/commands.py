from dataclasses import dataclass
from typing import Union

from .battleship import Orientation
from .coord_utils import format_coord, index_of


class CommandParseError(Exception):
    """Raised when a line cannot be parsed as a valid command."""


@dataclass(frozen=True)
class FireCommand:
    index: int

    @property
    def coord(self) -> str:
        return format_coord(self.index)


@dataclass(frozen=True)
class OrientCommand:
    orientation: Orientation


@dataclass(frozen=True)
class QuitCommand:
    pass


Command = Union[FireCommand, OrientCommand, QuitCommand]

_ORIENTATIONS = {"h": Orientation.HORIZONTAL, "v": Orientation.VERTICAL}


def _clean(line: str) -> str:
    if line is None:
        raise CommandParseError("No command to parse")
    raw = line.strip()
    if not raw:
        raise CommandParseError("Empty input")
    return raw


def parse_coord(line: str) -> Union[FireCommand, QuitCommand]:
    raw = _clean(line)
    if raw.upper() == "QUIT":
        return QuitCommand()
    index = index_of(raw)
    if index is None:
        raise CommandParseError(f"Invalid coordinate: {raw}")
    return FireCommand(index=index)


def parse_orientation(line: str) -> Union[OrientCommand, QuitCommand]:
    raw = _clean(line)
    if raw.upper() == "QUIT":
        return QuitCommand()
    orientation = _ORIENTATIONS.get(raw.lower())
    if orientation is None:
        raise CommandParseError(f"Orientation must be 'h' or 'v', got: {raw}")
    return OrientCommand(orientation=orientation)
