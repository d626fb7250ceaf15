import re
from typing import Optional, Tuple

from .config import BOARD_SIZE

# A-J names the column, 0-9 the row (9 is the top row). Either order is accepted.
COORD_RE = re.compile(r"^(?:[A-J][0-9]|[0-9][A-J])$")

CELL_COUNT = BOARD_SIZE * BOARD_SIZE


def index_of(token: str, *, strict: bool = False) -> Optional[int]:
    """
    Convert a coordinate like 'A5' or '5A' to a flat board index, or None if the
    token is not one of the 100 valid spellings.

    Typed input is trimmed and upper-cased first; with *strict* (tokens read off
    the wire) only the exact spellings are accepted.
    """
    coord = token if strict else token.strip().upper()
    if not COORD_RE.fullmatch(coord):
        return None
    if coord[0].isdigit():
        coord = coord[1] + coord[0]
    return to_index(BOARD_SIZE - 1 - int(coord[1]), ord(coord[0]) - ord('A'))


def format_coord(index: int) -> str:
    """
    Convert a flat index to its letter-first coordinate, e.g. 9 -> 'J9'.
    """
    row, col = to_rowcol(index)
    return f"{chr(ord('A') + col)}{BOARD_SIZE - 1 - row}"


def to_rowcol(index: int) -> Tuple[int, int]:
    return divmod(index, BOARD_SIZE)


def to_index(row: int, col: int) -> int:
    return row * BOARD_SIZE + col
