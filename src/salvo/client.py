"""Connecting side of a networked game."""

from __future__ import annotations

import logging
import random
import socket
from typing import Optional

from . import config as _cfg
from .console import Console
from .events import log_event
from .io_utils import Connection
from .player import Side
from .server import install_interrupt_handler, wait_for
from .session import ClientSession, Outcome

logger = logging.getLogger(__name__)


def connect(host: str, port: int) -> socket.socket:
    """Open the TCP connection to a waiting host. Raises OSError on failure."""
    sock = socket.create_connection((host, port))
    logger.info("Connected to server at %s:%d", host, port)
    return sock


def play(
    sock: socket.socket,
    side: Side,
    *,
    console: Optional[Console] = None,
    rng: Optional[random.Random] = None,
    timeout: float = _cfg.RECV_TIMEOUT,
    handle_signals: bool = True,
) -> Optional[Outcome]:
    """Run a :class:`ClientSession` for *side* over *sock* until the game ends."""
    conn = Connection(sock, timeout=timeout or None)
    session = ClientSession(conn, side, console=console, rng=rng, ask_manual=not side.kind.automated)
    session.subscribe(log_event)
    if handle_signals:
        install_interrupt_handler(conn)
    session.start()
    wait_for(session)
    return session.result
