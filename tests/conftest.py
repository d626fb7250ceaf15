import logging
import random
import socket

import pytest

from salvo.console import Console
from salvo.encryption import disable_encryption
from salvo.io_utils import Connection

# Suppress INFO & DEBUG logs from session threads during tests
logging.basicConfig(level=logging.WARNING)


class ScriptedConsole(Console):
    """Console fed from a list of lines; everything shown is captured."""

    def __init__(self, lines=()):
        super().__init__()
        self.lines = list(lines)
        self.output: list[str] = []
        self.prompts: list[str] = []

    def read_line(self, prompt: str = ">> ") -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError("script exhausted")
        return self.lines.pop(0).strip()

    def show(self, text: str) -> None:
        self.output.append(text)

    @property
    def text(self) -> str:
        return "\n".join(self.output)


@pytest.fixture
def scripted_console():
    """Factory: scripted_console(["A9", "h", ...])."""
    return ScriptedConsole


@pytest.fixture
def conn_pair():
    """Two connected Connections over a socket pair (host end, peer end)."""
    a, b = socket.socketpair()
    host_end, peer_end = Connection(a, timeout=10), Connection(b, timeout=10)
    yield host_end, peer_end
    host_end.close()
    peer_end.close()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture(autouse=True)
def _plain_framing():
    """Every test starts and ends with CRC framing."""
    disable_encryption()
    yield
    disable_encryption()
