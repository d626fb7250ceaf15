import logging
import random
import socket
import threading

import pytest

from salvo import client
from salvo.battleship import CellState
from salvo.cli import build_parser, configure_logging, main, make_side, run_single
from salvo.player import PlayerKind, Side
from salvo.server import listen, serve
from salvo.session import Outcome


@pytest.mark.parametrize("port", ["80", "1023", "65536", "http"])
def test_out_of_range_ports_are_rejected(port):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["server", port, "bob"])
    assert exc.value.code == 2


def test_server_arguments():
    args = build_parser().parse_args(["-v", "server", "1024", "bob", "--board", "fleet.txt"])
    assert (args.mode, args.port, args.name, args.board, args.verbose) == ("server", 1024, "bob", "fleet.txt", 1)


def test_client_arguments():
    args = build_parser().parse_args(["client", "10.0.0.2", "65535", "eve", "--ai", "random", "--secure"])
    assert (args.ip, args.port, args.name, args.ai) == ("10.0.0.2", 65535, "eve", "random")
    assert args.secure == "default"


def test_unknown_ai_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["single", "bob", "--ai", "psychic"])


def test_log_level_follows_flags():
    parser = build_parser()
    assert configure_logging(parser.parse_args(["-q", "single", "x"])) == logging.ERROR
    assert configure_logging(parser.parse_args(["--debug", "single", "x"])) == logging.DEBUG
    assert configure_logging(parser.parse_args(["-v", "single", "x"])) == logging.INFO


def test_make_side_loads_a_board(tmp_path):
    path = tmp_path / "fleet.txt"
    path.write_text("XX" + "-" * 98)
    side = make_side("bob", "hunt", str(path))
    assert side.kind is PlayerKind.HUNT_AI
    assert side.capacity == 2
    assert side.own_board[0] is CellState.SHIP


def test_bad_secure_key_is_a_usage_error():
    with pytest.raises(SystemExit) as exc:
        main(["single", "bob", "--secure=zz"])
    assert exc.value.code == 2


def test_unreachable_host_returns_1():
    spare = socket.socket()
    spare.bind(("127.0.0.1", 0))
    port = spare.getsockname()[1]
    spare.close()
    assert main(["client", "127.0.0.1", str(port), "bob", "--ai", "hunt"]) == 1


@pytest.mark.timeout(30)
def test_single_player_quits_at_first_prompt(scripted_console):
    console = scripted_console(["n", "quit"])
    result = run_single("alice", "random", console=console, rng=random.Random(11), handle_signals=False)
    assert result is Outcome.ABORTED
    assert console.prompts[0].startswith("Place your ships manually?")


@pytest.mark.timeout(60)
def test_server_and_client_over_tcp():
    server_sock = listen(0, "127.0.0.1")
    port = server_sock.getsockname()[1]
    results = []

    def _host():
        results.append(serve(server_sock, Side("host", PlayerKind.HUNT_AI), rng=random.Random(1), handle_signals=False))

    thread = threading.Thread(target=_host, daemon=True)
    thread.start()
    sock = client.connect("127.0.0.1", port)
    guest_result = client.play(sock, Side("guest", PlayerKind.HUNT_AI), rng=random.Random(2), handle_signals=False)
    thread.join(30)
    assert {results[0], guest_result} == {Outcome.WON, Outcome.LOST}
