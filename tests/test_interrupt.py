import random
import signal

import pytest

from salvo import messages
from salvo.placement import place_fleet_randomly
from salvo.player import PlayerKind, Side
from salvo.server import install_interrupt_handler, make_interrupt_handler
from salvo.session import GameSession, Outcome


@pytest.mark.timeout(10)
def test_interrupt_tells_the_peer_and_wakes_the_session(conn_pair):
    host_conn, peer = conn_pair
    host = Side("host", PlayerKind.HUNT_AI)
    place_fleet_randomly(host, random.Random(1))
    session = GameSession(host_conn, host)
    session.start()
    # the session now blocks waiting for Login
    assert isinstance(peer.recv(), messages.Welcome)

    handler = make_interrupt_handler(host_conn)
    with pytest.raises(SystemExit):
        handler(signal.SIGINT, None)

    assert peer.recv() == messages.Quit()
    session.join(5)
    assert not session.is_alive()
    assert session.result is Outcome.DROPPED


def test_handler_is_installed_for_sigint_and_sigterm(conn_pair):
    host_conn, _ = conn_pair
    old_int = signal.getsignal(signal.SIGINT)
    old_term = signal.getsignal(signal.SIGTERM)
    try:
        install_interrupt_handler(host_conn)
        assert signal.getsignal(signal.SIGINT) is not old_int
        assert signal.getsignal(signal.SIGTERM) is signal.getsignal(signal.SIGINT)
    finally:
        signal.signal(signal.SIGINT, old_int)
        signal.signal(signal.SIGTERM, old_term)
