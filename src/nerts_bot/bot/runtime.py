"""
Bot runtime: the shared aggregate and its background activities.

Architecture:
    receive thread  - polls the transport, decodes each datagram and applies
                      it to the GameState, then broadcasts "state changed"
    send thread     - wakes on request_send() or every send_interval,
                      drains the intent scratch fields into a ClientMessage
                      and sends it
    decision loop   - runs on the caller's thread (see decision.py) and
                      blocks in wait_until() between actions

All three share one threading.Condition: holding it gives exclusive access
to the GameState, and notify_all() on it is the update broadcast. Waiters
re-check their predicate against current state on every broadcast, so a
missed notification only delays them until the next tick.

Shutdown is cooperative through one Event. An activity that dies from an
exception records it as ``fatal_error`` and shuts the whole bot down.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from ..config import BotConfig
from ..errors import DesyncError, TransportError
from ..sentry_config import capture_exception, capture_message
from ..state.game_state import GameState
from ..wire.builders import build_client_message
from ..wire.frames import FrameDecoder
from ..wire.parsers import parse_server_message
from ..wire.records import ClientMessage

logger = logging.getLogger(__name__)

StatePredicate = Callable[[GameState], bool]


class Bot:
    """
    Owns the GameState and the activities that keep it in sync.

    Args:
        transport: Connected transport collaborator.
        local_id: Peer id of the bot itself, used to find its own seat.
        config: Runtime configuration (defaults if omitted).
        server_id: Peer id of the game server, if already known.
    """

    def __init__(self, transport, local_id: int, config: Optional[BotConfig] = None,
                 server_id: Optional[int] = None):
        self.transport = transport
        self.config = config or BotConfig()
        self.state = GameState(local_id)
        self.frames = FrameDecoder()
        self.server_id = server_id
        self.tick = 0
        self.fatal_error: Optional[BaseException] = None

        self._cond = threading.Condition()
        self._send_now = threading.Event()
        self._shutdown = threading.Event()
        self._threads: List[threading.Thread] = []

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> "Bot":
        """Start the receive and send activities."""
        if self._threads:
            return self
        for name, target in (("receive", self._receive_loop), ("send", self._send_loop)):
            thread = threading.Thread(
                target=self._run_activity, args=(name, target),
                name=f"nerts-{name}", daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        logger.info(f"Bot started for local player {self.state.local_id}")
        return self

    def stop(self, timeout: float = 2.0) -> None:
        """Signal shutdown, wake every waiter and join the activities."""
        self._shutdown.set()
        self._send_now.set()
        with self._cond:
            self._cond.notify_all()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join(timeout)

    def is_running(self) -> bool:
        return not self._shutdown.is_set()

    def __enter__(self) -> "Bot":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def connect(self, server_id: int) -> None:
        """Attach to a game server and ask it for a keyframe."""
        with self._cond:
            self.server_id = server_id
            self.frames.reset()
            self.state.send_key_frame = True
        logger.info(f"Connected to server {server_id}")
        self.request_send()

    # -------------------------------------------------------------------------
    # Shared state access
    # -------------------------------------------------------------------------

    @contextmanager
    def locked(self) -> Iterator[GameState]:
        """Exclusive access to the GameState."""
        with self._cond:
            yield self.state

    def wait_until(self, predicate: StatePredicate, timeout: Optional[float] = None) -> bool:
        """Block until ``predicate(state)`` holds, the timeout passes, or shutdown.

        The predicate runs with the lock held, once up front and again after
        every broadcast.

        Returns:
            Whether the predicate held when the wait ended.
        """
        if timeout is None:
            timeout = self.config.wait_timeout
        with self._cond:
            self._cond.wait_for(
                lambda: self._shutdown.is_set() or predicate(self.state), timeout
            )
            return bool(predicate(self.state))

    def wait_for_update(self, timeout: Optional[float] = None) -> bool:
        """Block until the next snapshot is applied (or timeout / shutdown)."""
        with self._cond:
            seen = self.tick
        return self.wait_until(lambda _: self.tick != seen, timeout)

    def request_send(self) -> None:
        """Ask the send activity to send an intent now."""
        self._send_now.set()

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def handle_packet(self, peer_id: int, payload: bytes) -> bool:
        """Decode one datagram and apply it to the state.

        Returns:
            True if the tick was applied, False if it was ignored or dropped.

        Raises:
            FormatError, ClassificationError, InvariantError: Fatal; the
                previous state is left untouched.
        """
        if peer_id != self.server_id:
            logger.debug(f"Ignoring {len(payload)} bytes from unknown peer {peer_id}")
            return False

        with self._cond:
            try:
                frame = self.frames.decode(payload)
            except DesyncError as e:
                logger.warning(f"Dropping tick {self.tick + 1}: {e}. Requesting keyframe")
                capture_message(f"Snapshot stream desync, keyframe requested: {e}", level="warning")
                self.state.send_key_frame = True
                self._send_now.set()
                return False

            message = parse_server_message(frame)
            self.frames.commit(frame)
            self.state.update(message)
            self.tick += 1
            self._cond.notify_all()

        logger.debug(
            f"Applied tick {self.tick}: phase={message.phase.name} "
            f"players={len(message.players)} cards={len(message.cards)}"
        )
        return True

    def _receive_loop(self) -> None:
        channel = self.config.to_client_channel
        while not self._shutdown.is_set():
            if self.transport.poll_available(channel) is None:
                self._shutdown.wait(self.config.poll_interval)
                continue
            received = self.transport.receive(channel, self.config.receive_buffer_size)
            if received is None:
                continue
            peer_id, data = received
            self.handle_packet(peer_id, data)

    # -------------------------------------------------------------------------
    # Outbound
    # -------------------------------------------------------------------------

    def create_client_message(self) -> ClientMessage:
        """Build an intent from the scratch fields and clear the one-shot flags.

        Must be called with the lock held.
        """
        state = self.state
        message = ClientMessage(
            x=state.target_cursor_pos.x,
            y=state.target_cursor_pos.y,
            left_click=state.send_left_click,
            right_click=state.send_right_click,
            make_ready=state.send_make_ready,
            draw=state.send_draw,
            card_back=state.target_card_back,
            card_color=state.target_card_color,
            send_key_frame=state.send_key_frame,
        )
        state.send_left_click = False
        state.send_right_click = False
        state.send_make_ready = False
        state.send_draw = False
        state.send_key_frame = False
        return message

    def _send_loop(self) -> None:
        channel = self.config.to_server_channel
        while not self._shutdown.is_set():
            self._send_now.wait(self.config.send_interval)
            self._send_now.clear()
            if self._shutdown.is_set():
                break

            with self._cond:
                server_id = self.server_id
                if server_id is None:
                    continue
                message = self.create_client_message()

            logger.debug(f"Sending {message}")
            if not self.transport.send(server_id, build_client_message(message), channel):
                raise TransportError(f"Transport refused intent for server {server_id}")

    # -------------------------------------------------------------------------
    # Failure handling
    # -------------------------------------------------------------------------

    def _run_activity(self, name: str, target: Callable[[], None]) -> None:
        try:
            target()
        except Exception as e:
            logger.error(f"{name} activity failed at tick {self.tick}: {e}", exc_info=True)
            capture_exception(e, context={"activity": name, "tick": self.tick})
            with self._cond:
                if self.fatal_error is None:
                    self.fatal_error = e
            self.stop()
        else:
            logger.debug(f"{name} activity stopped")


__all__ = ['Bot', 'StatePredicate']
