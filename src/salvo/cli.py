"""Command-line entry point: ``salvo server|client|single``."""

from __future__ import annotations

import argparse
import logging
import random
import socket
import sys
from typing import List, Optional

from . import config as _cfg
from .battleship import Board
from .console import Console
from .encryption import enable_encryption
from .events import log_event
from .io_utils import Connection, load_board
from .player import PlayerKind, Side
from .server import install_interrupt_handler, listen, serve, wait_for
from .session import ClientSession, GameSession, Outcome
from . import client as _client

logger = logging.getLogger(__name__)

AI_CHOICES = [PlayerKind.RANDOM_AI.value, PlayerKind.HUNT_AI.value]


def port_type(value: str) -> int:
    """argparse type for a non-reserved TCP port."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not _cfg.MIN_PORT <= port <= _cfg.MAX_PORT:
        raise argparse.ArgumentTypeError(f"port must be between {_cfg.MIN_PORT} and {_cfg.MAX_PORT}, got {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="salvo", description="Two-player naval combat over TCP.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )

    sub = parser.add_subparsers(dest="mode", required=True)

    srv = sub.add_parser("server", help="Wait for an opponent and host the game.")
    srv.add_argument("port", type=port_type)
    srv.add_argument("name")
    srv.add_argument("--board", metavar="FILE", help="Load the fleet from FILE instead of placing it.")

    joiner = sub.add_parser("client", help="Join a game hosted elsewhere.")
    joiner.add_argument("ip")
    joiner.add_argument("port", type=port_type)
    joiner.add_argument("name")
    joiner.add_argument("--board", metavar="FILE", help="Load the fleet from FILE instead of placing it.")
    joiner.add_argument("--ai", choices=AI_CHOICES, help="Let the computer play this side.")

    single = sub.add_parser("single", help="Play against the computer.")
    single.add_argument("name")
    single.add_argument("--ai", choices=AI_CHOICES, default=PlayerKind.HUNT_AI.value, help="Opponent strategy.")
    for mode in (srv, joiner, single):
        mode.add_argument(
            "--secure", nargs="?", const="default", metavar="HEX", help="Enable AES-GCM framing, optionally with a hex key"
        )
    return parser


def configure_logging(args: argparse.Namespace) -> int:
    # Determine log level from CLI flags:
    if args.quiet:
        level = logging.ERROR
    elif args.debug or _cfg.DEBUG:
        level = logging.DEBUG
    elif args.verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return level


def make_side(name: str, ai: Optional[str] = None, board_path: Optional[str] = None) -> Side:
    kind = PlayerKind(ai) if ai else PlayerKind.HUMAN
    board = load_board(board_path) if board_path else Board()
    return Side.with_board(name, kind, board)


def run_single(
    name: str,
    ai: str = PlayerKind.HUNT_AI.value,
    *,
    console: Optional[Console] = None,
    rng: Optional[random.Random] = None,
    handle_signals: bool = True,
) -> Optional[Outcome]:
    """Host a game for the human player against a computer client over a socket pair."""
    rng = rng or random.Random()
    host_sock, bot_sock = socket.socketpair()
    host_conn = Connection(host_sock)
    bot_conn = Connection(bot_sock)

    host = GameSession(host_conn, Side(name), console=console or Console(), rng=rng, ask_manual=True)
    bot = ClientSession(bot_conn, Side("Computer", PlayerKind(ai)), rng=random.Random(rng.random()))
    host.subscribe(log_event)
    if handle_signals:
        install_interrupt_handler(host_conn)
    bot.start()
    host.start()
    wait_for(host)
    bot.join(timeout=5)
    return host.result


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args)

    if args.secure is not None:
        try:
            key = _cfg.DEFAULT_KEY if args.secure == "default" else bytes.fromhex(args.secure)
            enable_encryption(key)
        except ValueError as exc:
            parser.error(f"--secure: {exc}")
        logger.info("Encryption enabled")

    console = Console()
    if args.mode == "single":
        result = run_single(args.name, args.ai, console=console)
    elif args.mode == "server":
        side = make_side(args.name, board_path=args.board)
        try:
            server_sock = listen(args.port)
        except OSError as exc:
            logger.error("cannot listen on port %d: %s", args.port, exc)
            return 1
        result = serve(server_sock, side, console=console)
    else:
        side = make_side(args.name, args.ai, args.board)
        try:
            sock = _client.connect(args.ip, args.port)
        except OSError as exc:
            logger.error("cannot connect to %s:%d: %s", args.ip, args.port, exc)
            return 1
        result = _client.play(sock, side, console=console)

    logger.info("game ended: %s", result.value if result else "unknown")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
