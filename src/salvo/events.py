"""Lightweight event model used by the sessions to report progress.

Subscribers (the CLI's log sink, tests) get strongly-typed events instead of
having to parse the text shown to the player.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict

logger = logging.getLogger(__name__)


class Category(Enum):
    """High-level event categories."""

    SETUP = auto()  # handshake, placement, board exchange
    TURN = auto()  # per-turn lifecycle (turn, shot)
    SYSTEM = auto()  # start / end of a session, drops


@dataclass(slots=True)
class Event:
    """Immutable event emitted by a session."""

    category: Category
    type: str  # finer-grained identifier, e.g. "shot", "turn", "end"
    payload: Dict[str, Any]


def log_event(ev: Event) -> None:
    """Subscriber that forwards every event to the log at DEBUG level."""
    logger.debug("%s/%s %s", ev.category.name.lower(), ev.type, ev.payload)
