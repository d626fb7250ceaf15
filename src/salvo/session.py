"""Two-player game sessions.

A match is played between a *host*, which accepted the connection and owns the
authoritative game state, and a *client*. Each side runs its end of the match
in its own daemon thread over a shared :class:`~salvo.io_utils.Connection`.

Host → Client messages
----------------------
Welcome(text, host_name)  First message; the client answers with Login(name).
Text(text)                Informational line for the player.
RequestBoard              Ask for the client's fleet; answered with Board(cells).
TurnHost                  The host is about to shoot; the next Hit/Miss is for
                          the client's own board.
RequestCoord              The client's turn; answered with Shoot(coord).
Hit(index) / Miss(index)  Result of the shot that was just fired.
Won / Lost                The client has won / lost.
Unexpected                The client sent something out of place.
Quit                      The sender is leaving; no further messages follow.

Ping may be sent by either side at any time and is answered with Ping.

Termination
-----------
The host ends a decided game, and a protocol error (after Unexpected), with
Quit. A Quit from the peer, or a dropped connection, ends the session without
sending anything more.
"""

from __future__ import annotations

import enum
import logging
import random
import threading
from typing import Callable, Dict, List, Optional, Type

from . import config as _cfg
from . import messages
from .bot_logic import SelectorMode, TargetSelector
from .console import Console, SilentConsole
from .coord_utils import format_coord, index_of
from .events import Category, Event
from .io_utils import Connection, ConnectionDropped
from .placement import place_fleet_randomly
from .placement_wizard import run as place_ships
from .player import PlayerKind, PlayerQuit, ShotResult, Side, fire_at, next_shot

logger = logging.getLogger(__name__)


class ProtocolError(Exception):
    """The peer sent a message that is not valid at this point of the game."""


class _PeerQuit(Exception):
    pass


class Outcome(str, enum.Enum):
    """How a session ended, from the point of view of the local side."""

    WON = "won"
    LOST = "lost"
    QUIT = "quit"  # the peer left
    DROPPED = "dropped"  # connection lost or undecodable traffic
    ABORTED = "aborted"  # local quit or protocol error


class _Session(threading.Thread):
    """Plumbing shared by both ends: connection, console, event bus, shutdown."""

    def __init__(
        self,
        conn: Connection,
        side: Side,
        *,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        ask_manual: bool = False,
        name: str,
    ) -> None:
        super().__init__(daemon=True, name=name)
        self.conn = conn
        self.side = side
        if console is None:
            console = SilentConsole() if side.kind.automated else Console()
        self.console = console
        self._rng = rng or random.Random()
        if side.kind.automated:
            # shot selection follows the session random stream
            side.selector = TargetSelector(SelectorMode(side.kind.value), rng=random.Random(self._rng.random()))
        self._ask_manual = ask_manual
        self.result: Optional[Outcome] = None
        self._subs: List[Callable[[Event], None]] = []

    # -------------------- event bus --------------------
    def subscribe(self, cb: Callable[[Event], None]) -> None:
        """Allow external components (CLI, tests) to receive session events."""
        self._subs.append(cb)

    def _emit(self, ev: Event) -> None:
        for cb in tuple(self._subs):
            try:
                cb(ev)
            except Exception:
                # A misbehaving subscriber must not kill the session thread
                logger.exception("event subscriber failed on %s", ev.type)

    # -------------------- shared steps --------------------
    def _place_own_fleet(self) -> None:
        """Lay out the local fleet unless a board was loaded beforehand."""
        if not self.side.own_board.is_empty():
            self.side.capacity = self.side.own_board.ship_cell_count()
            return
        if self.side.kind.automated:
            place_fleet_randomly(self.side, self._rng)
        else:
            place_ships(self.side, self.console, ask_manual=self._ask_manual, rng=self._rng)
        self._emit(Event(Category.SETUP, "placed", {"side": self.side.name, "capacity": self.side.capacity}))

    def _protocol_error(self, exc: ProtocolError) -> None:
        logger.warning("protocol error: %s", exc)
        try:
            self.conn.send(messages.Unexpected())
            self.conn.send(messages.Quit())
        except ConnectionDropped as drop:
            logger.debug("peer gone while reporting protocol error: %s", drop)
        self.result = Outcome.ABORTED

    def _finish(self) -> None:
        self.conn.shutdown()
        self.conn.close()
        logger.info("session over: %s", self.result.value if self.result else "unknown")
        self._emit(Event(Category.SYSTEM, "end", {"result": self.result.value if self.result else None}))

    def _body(self) -> None:
        raise NotImplementedError

    def run(self) -> None:
        self._emit(Event(Category.SYSTEM, "start", {"side": self.side.name}))
        try:
            self._body()
        except _PeerQuit:
            logger.info("opponent quit")
            self.console.show("Your opponent left the game.")
            self.result = Outcome.QUIT
        except ConnectionDropped as exc:
            logger.warning("connection dropped: %s", exc)
            self.console.show("Connection dropped...")
            self.result = Outcome.DROPPED
        except ProtocolError as exc:
            self._protocol_error(exc)
        except PlayerQuit as exc:
            logger.info("local player quit: %s", exc)
            self.conn.send_quit()
            self.result = Outcome.ABORTED
        finally:
            self._finish()


class GameSession(_Session):
    """Host side of a match: drives the whole game and decides every shot."""

    def __init__(
        self,
        conn: Connection,
        host: Side,
        *,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        shoot_again_on_hit: Optional[bool] = None,
        greeting: str = _cfg.GREETING,
        ask_manual: bool = False,
    ) -> None:
        """Create the host thread.

        Args:
            conn: Connection to the client, already established.
            host: The local side. Its own board may already hold a fleet
                (e.g. loaded from a file); otherwise one is placed at setup.
            shoot_again_on_hit: Keep the turn after a hit. Defaults to
                ``config.SHOOT_AGAIN_ON_HIT``.
        """
        super().__init__(conn, host, console=console, rng=rng, ask_manual=ask_manual, name="salvo-host")
        self.host = host
        # Host-side record of the client: its fleet and what it knows of ours.
        self.client = Side(name="client", kind=PlayerKind.HUMAN)
        self.greeting = greeting
        self.shoot_again_on_hit = _cfg.SHOOT_AGAIN_ON_HIT if shoot_again_on_hit is None else shoot_again_on_hit
        self.host_turn: Optional[bool] = None

    def _body(self) -> None:
        self._handshake()
        if self.host.own_board.is_empty():
            self.conn.send(messages.Text("Server is setting its ships, please wait :)"))
        self._place_own_fleet()
        self._exchange_boards()
        self._play()

    # -------------------- setup --------------------
    def _handshake(self) -> None:
        self.conn.send(messages.Welcome(self.greeting, self.host.name))
        while True:
            msg = self.conn.recv()
            if isinstance(msg, messages.Login):
                break
            if isinstance(msg, messages.Quit):
                raise _PeerQuit()
            if isinstance(msg, messages.Ping):
                self.conn.send(messages.Ping())
                continue
            raise ProtocolError(f"expected Login, got {type(msg).__name__}")
        self.client.name = msg.name
        logger.info("%s joined", msg.name)
        self.console.show(f"{msg.name} joined the game.")
        self._emit(Event(Category.SETUP, "login", {"name": msg.name}))

    def _exchange_boards(self) -> None:
        self.conn.send(messages.RequestBoard())
        while True:
            msg = self.conn.recv()
            if isinstance(msg, messages.Board):
                break
            if isinstance(msg, messages.Quit):
                raise _PeerQuit()
            if isinstance(msg, messages.Ping):
                self.conn.send(messages.Ping())
                continue
            if isinstance(msg, messages.Text):
                self.console.show(f"{self.client.name}: {msg.text}")
                continue
            raise ProtocolError(f"expected Board, got {type(msg).__name__}")

        board = msg.to_board()
        if any(cell.resolved for cell in board):
            raise ProtocolError("board contains fired-upon cells")
        if board.is_empty():
            raise ProtocolError("board contains no ships")
        self.client.own_board = board
        self.client.capacity = board.ship_cell_count()
        logger.info("%s placed %d ship cells", self.client.name, self.client.capacity)
        self._emit(Event(Category.SETUP, "boards", {"host": self.host.capacity, "client": self.client.capacity}))

    # -------------------- play --------------------
    def _play(self) -> None:
        self.host_turn = self._rng.random() < 0.5
        starter = self.host.name if self.host_turn else self.client.name
        logger.info("%s starts", starter)
        self.console.show("You start." if self.host_turn else f"{self.client.name} starts.")
        self._emit(Event(Category.TURN, "starter", {"side": starter}))

        while True:
            if self.host_turn:
                hit = self._host_shot()
                defender = self.client
            else:
                hit = self._client_shot()
                defender = self.host
            if defender.defeated:
                self._conclude()
                return
            if not (hit and self.shoot_again_on_hit):
                self.host_turn = not self.host_turn

    def _host_shot(self) -> bool:
        self._emit(Event(Category.TURN, "turn", {"side": self.host.name}))
        self.conn.send(messages.TurnHost())
        while True:
            self.console.show_boards(self.host.own_board, self.host.op_board)
            index = next_shot(self.host, self.console)
            result = fire_at(self.host, self.client, index)
            if result is not ShotResult.ALREADY_RESOLVED:
                break
        hit = result is ShotResult.HIT
        self.conn.send(messages.Hit(index) if hit else messages.Miss(index))
        self._report_shot(self.host, index, hit)
        return hit

    def _client_shot(self) -> bool:
        self._emit(Event(Category.TURN, "turn", {"side": self.client.name}))
        self.console.show(f"Waiting for {self.client.name} to shoot...")
        while True:
            self.conn.send(messages.RequestCoord())
            token = self._await_shoot()
            index = index_of(token, strict=True)
            if index is None:
                self.conn.send(messages.Text(f"Invalid coordinate {token!r}, again please."))
                continue
            result = fire_at(self.client, self.host, index)
            if result is ShotResult.ALREADY_RESOLVED:
                self.conn.send(messages.Text(f"Already fired at {format_coord(index)}, pick another cell."))
                continue
            break
        hit = result is ShotResult.HIT
        self.conn.send(messages.Hit(index) if hit else messages.Miss(index))
        self._report_shot(self.client, index, hit)
        return hit

    def _await_shoot(self) -> str:
        while True:
            msg = self.conn.recv()
            if isinstance(msg, messages.Shoot):
                return msg.coord
            if isinstance(msg, messages.Quit):
                raise _PeerQuit()
            if isinstance(msg, messages.Ping):
                self.conn.send(messages.Ping())
                continue
            if isinstance(msg, messages.Text):
                self.console.show(f"{self.client.name}: {msg.text}")
                continue
            raise ProtocolError(f"expected Shoot, got {type(msg).__name__}")

    def _report_shot(self, attacker: Side, index: int, hit: bool) -> None:
        coord = format_coord(index)
        logger.debug("%s fires at %s: %s", attacker.name, coord, "hit" if hit else "miss")
        self.console.show(f"{attacker.name} fires at {coord}: {'hit' if hit else 'miss'}.")
        self._emit(Event(Category.TURN, "shot", {"by": attacker.name, "coord": coord, "hit": hit}))

    def _conclude(self) -> None:
        host_won = self.client.defeated
        self.conn.send(messages.Lost() if host_won else messages.Won())
        self.conn.send(messages.Quit())
        self.result = Outcome.WON if host_won else Outcome.LOST
        self.console.show_boards(self.host.own_board, self.host.op_board)
        self.console.show("You won!" if host_won else "You lost!")


class ClientSession(_Session):
    """Connecting side of a match: answers whatever the host asks for."""

    def __init__(
        self,
        conn: Connection,
        side: Side,
        *,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        ask_manual: bool = False,
    ) -> None:
        super().__init__(conn, side, console=console, rng=rng, ask_manual=ask_manual, name="salvo-client")
        self.host_name: Optional[str] = None
        self._pending_shot: Optional[int] = None
        self._incoming = False
        self._handlers: Dict[Type[object], Callable[[object], bool]] = {
            messages.Welcome: self._on_welcome,
            messages.Ping: self._on_ping,
            messages.RequestBoard: self._on_request_board,
            messages.RequestCoord: self._on_request_coord,
            messages.TurnHost: self._on_turn_host,
            messages.Hit: self._on_result,
            messages.Miss: self._on_result,
            messages.Text: self._on_text,
            messages.Unexpected: self._on_unexpected,
            messages.Won: self._on_won,
            messages.Lost: self._on_lost,
            messages.Quit: self._on_quit,
        }

    def _body(self) -> None:
        while True:
            msg = self.conn.recv()
            handler = self._handlers.get(type(msg))
            if handler is None:
                raise ProtocolError(f"unexpected {type(msg).__name__} from host")
            if handler(msg):
                return

    # Each handler returns True once the session is over.

    def _on_welcome(self, msg: messages.Welcome) -> bool:
        self.host_name = msg.host_name
        self.console.show(f"{msg.host_name}: {msg.text}")
        self.conn.send(messages.Login(self.side.name))
        self._emit(Event(Category.SETUP, "login", {"name": self.side.name}))
        return False

    def _on_ping(self, msg: messages.Ping) -> bool:
        self.conn.send(messages.Ping())
        return False

    def _on_request_board(self, msg: messages.RequestBoard) -> bool:
        self._place_own_fleet()
        self.conn.send(messages.Board.of(self.side.own_board))
        self.console.show_boards(self.side.own_board, self.side.op_board)
        return False

    def _on_request_coord(self, msg: messages.RequestCoord) -> bool:
        self._emit(Event(Category.TURN, "turn", {"side": self.side.name}))
        self.console.show_boards(self.side.own_board, self.side.op_board)
        index = next_shot(self.side, self.console)
        self._pending_shot = index
        self.conn.send(messages.Shoot(format_coord(index)))
        return False

    def _on_turn_host(self, msg: messages.TurnHost) -> bool:
        self._incoming = True
        self.console.show(f"{self.host_name or 'Host'} is shooting...")
        return False

    def _on_result(self, msg: messages.Hit | messages.Miss) -> bool:
        hit = isinstance(msg, messages.Hit)
        coord = format_coord(msg.index)
        incoming = self._incoming
        if incoming:
            self._incoming = False
            self.side.record_incoming(msg.index, hit)
            self.console.show(f"{self.host_name or 'Host'} fires at {coord}: {'hit' if hit else 'miss'}.")
        elif self._pending_shot == msg.index:
            self._pending_shot = None
            self.side.record_shot(msg.index, hit)
            self.console.show(f"You fire at {coord}: {'hit' if hit else 'miss'}.")
        else:
            raise ProtocolError(f"result for {coord} without a matching shot")
        self._emit(Event(Category.TURN, "shot", {"coord": coord, "hit": hit, "incoming": incoming}))
        return False

    def _on_text(self, msg: messages.Text) -> bool:
        self.console.show(msg.text)
        return False

    def _on_unexpected(self, msg: messages.Unexpected) -> bool:
        logger.warning("host reported an unexpected message")
        self.console.show("Handshake done wrong!")
        self.result = Outcome.ABORTED
        return False

    def _on_won(self, msg: messages.Won) -> bool:
        self.result = Outcome.WON
        self.console.show("You won!")
        return False

    def _on_lost(self, msg: messages.Lost) -> bool:
        self.result = Outcome.LOST
        self.console.show("You lost!")
        return False

    def _on_quit(self, msg: messages.Quit) -> bool:
        if self.result is None:
            logger.info("host quit")
            self.console.show("Your opponent left the game.")
            self.result = Outcome.QUIT
        return True
