"""Hosting side of a networked game.

The server accepts exactly one opponent, hands the connection to a
:class:`~salvo.session.GameSession` running on a daemon thread and waits for
it in the main thread, where SIGINT/SIGTERM are handled.
"""

from __future__ import annotations

import logging
import random
import signal
import socket
import sys
import threading
from typing import Callable, Optional

from . import config as _cfg
from .console import Console
from .events import log_event
from .io_utils import Connection
from .player import Side
from .session import GameSession, Outcome

logger = logging.getLogger(__name__)


def make_interrupt_handler(conn: Connection) -> Callable[[int, object], None]:
    """Build a signal handler that tells the peer we quit and releases *conn*.

    Shutting the socket down wakes the session thread out of a blocked
    receive; it then ends as a dropped connection.
    """

    def _shutdown(signum, frame):
        # ensure the "^C" echo doesn't get stuck on our log line
        sys.stderr.write("\n")
        logger.info("Received signal %s, shutting down", signum)
        conn.send_quit()
        conn.shutdown()
        sys.exit(0)

    return _shutdown


def install_interrupt_handler(conn: Connection) -> None:
    handler = make_interrupt_handler(conn)
    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


def wait_for(session: threading.Thread, poll: float = 0.5) -> None:
    """Join *session* in short slices so the main thread can still take signals."""
    while session.is_alive():
        session.join(poll)


def listen(port: int, host: str = _cfg.DEFAULT_HOST) -> socket.socket:
    server_sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server_sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server_sock.bind((host, port))
    server_sock.listen(1)
    logger.info("listening on %s:%d", host, server_sock.getsockname()[1])
    return server_sock


def serve(
    server_sock: socket.socket,
    side: Side,
    *,
    console: Optional[Console] = None,
    rng: Optional[random.Random] = None,
    shoot_again_on_hit: Optional[bool] = None,
    timeout: float = _cfg.RECV_TIMEOUT,
    handle_signals: bool = True,
) -> Optional[Outcome]:
    """Accept one opponent on *server_sock* and host a game for *side*."""
    with server_sock:
        if console is not None:
            console.show(f"Waiting for an opponent on port {server_sock.getsockname()[1]}...")
        sock, addr = server_sock.accept()
    logger.info("opponent connected from %s:%d", *addr[:2])

    conn = Connection(sock, timeout=timeout or None)
    session = GameSession(
        conn,
        side,
        console=console,
        rng=rng,
        shoot_again_on_hit=shoot_again_on_hit,
        ask_manual=not side.kind.automated,
    )
    session.subscribe(log_event)
    if handle_signals:
        install_interrupt_handler(conn)
    session.start()
    wait_for(session)
    return session.result
