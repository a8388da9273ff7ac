"""Shared pytest fixtures for nerts-bot tests."""

import threading
from collections import deque
from dataclasses import replace

import pytest

from nerts_bot.bot.transport import Transport
from nerts_bot.state.game_state import GameState
from nerts_bot.types import GamePhase
from nerts_bot.wire import (
    CardMessage,
    CardOutlineMessage,
    PlayerMessage,
    ServerMessage,
    parse_client_message,
)


# Peer ids for tests
LOCAL_ID = 76561198064411451
PLAYER_B = 76561199244422576
PLAYER_C = 76561198040136714
SERVER_ID = 76561190000000001


def make_player(player_id, origin_x, origin_y, flipped, **overrides) -> PlayerMessage:
    """PlayerMessage for an active, not-ready player with 5 table piles."""
    fields = dict(
        player_id=player_id,
        origin_x=origin_x,
        origin_y=origin_y,
        flipped=flipped,
        is_playing=True,
        is_ready=False,
        can_call_nerts=False,
        show_deck_button=False,
        effects=0,
        card_color=0,
        tableau_count=5,
        called_nerts=False,
        nerts_cards=13,
        holding_nerts_card=False,
        points_cards=0,
        total_score=0,
        history_points=(),
        history_nertsed=(),
        ignore_disable_foundation=False,
        cursor_x=0,
        cursor_y=0,
    )
    fields.update(overrides)
    return PlayerMessage(**fields)


# =============================================================================
# THREE-PLAYER BOARD (captured from a live game)
# =============================================================================

PLAYERS = (
    make_player(LOCAL_ID, 554, 238, False, card_color=6, total_score=18,
                history_points=(18,), history_nertsed=(True,), cursor_x=3838, cursor_y=1086),
    make_player(PLAYER_B, 1256, 1382, True, card_color=8, total_score=22,
                history_points=(22,), history_nertsed=(False,), cursor_x=629, cursor_y=1432),
    make_player(PLAYER_C, 1958, 238, False, card_color=3,
                history_points=(0,), history_nertsed=(False,), cursor_x=1908, cursor_y=508),
)

# Local player: draw pile down, 12 face-down nerts cards, 10D on top, tables 4C KS JC 5H 10S
CARDS_A = (
    CardMessage(636, 378, 6, 0, 28),
    *[CardMessage(x, 642, 6, 4, 0)
      for x in (638, 651, 665, 678, 692, 705, 719, 732, 746, 759, 773, 786)],
    CardMessage(800, 642, 22, 5, 0),
    CardMessage(1014, 642, 3, 1, 0),
    CardMessage(1174, 642, 51, 1, 0),
    CardMessage(1334, 642, 10, 1, 0),
    CardMessage(1494, 642, 30, 1, 0),
    CardMessage(1654, 642, 48, 1, 0),
)

# Flipped player: nerts fan runs right to left with 4C on top, AD on the table
CARDS_B = (
    CardMessage(2356, 1828, 8, 2, 28),
    *[CardMessage(x, 1564, 8, 6, 0)
      for x in (2354, 2340, 2327, 2313, 2300, 2286, 2273, 2259, 2246, 2232, 2219, 2205)],
    CardMessage(2192, 1564, 3, 7, 0),
    CardMessage(1980, 1564, 49, 3, 0),
    CardMessage(1820, 1564, 23, 3, 0),
    CardMessage(1660, 1564, 13, 3, 0),
    CardMessage(1500, 1564, 38, 3, 0),
    CardMessage(1340, 1564, 30, 3, 0),
)

CARDS_C = (
    CardMessage(2040, 378, 3, 0, 28),
    *[CardMessage(x, 642, 3, 4, 0)
      for x in (2042, 2055, 2069, 2082, 2096, 2109, 2123, 2136, 2150, 2163, 2177, 2190)],
    CardMessage(2204, 642, 40, 5, 0),
    CardMessage(2418, 642, 45, 1, 0),
    CardMessage(2578, 642, 1, 1, 0),
    CardMessage(2738, 642, 48, 1, 0),
    CardMessage(2898, 642, 13, 1, 0),
    CardMessage(3058, 642, 29, 1, 0),
)

OUTLINES = tuple(CardOutlineMessage(967 + 160 * i, 1102) for i in range(12))

# Code 13 is the Ace of diamonds
ACE_OF_DIAMONDS = 13
FACE_UP = 0x01


def with_cards(message: ServerMessage, *cards: CardMessage) -> ServerMessage:
    """Copy of ``message`` with extra loose cards appended."""
    return replace(message, cards=message.cards + tuple(cards))


def with_local_player(message: ServerMessage, **overrides) -> ServerMessage:
    """Copy of ``message`` with fields of the local player's record replaced."""
    players = (replace(message.players[0], **overrides),) + message.players[1:]
    return replace(message, players=players)


@pytest.fixture
def play_message():
    """Keyframe snapshot of a three-player round in the Play phase."""
    return ServerMessage(
        phase=GamePhase.PLAY,
        players=PLAYERS,
        cards=CARDS_A + CARDS_B + CARDS_C,
        card_outlines=OUTLINES,
    )


@pytest.fixture
def lobby_message():
    """Lobby snapshot: seats known, nobody dealt in yet."""
    return ServerMessage(
        phase=GamePhase.LOBBY,
        players=tuple(replace(p, is_playing=False) for p in PLAYERS),
        cards=(),
        card_outlines=(),
    )


@pytest.fixture
def play_state(play_message):
    """GameState after applying the three-player snapshot."""
    state = GameState(LOCAL_ID)
    state.update(play_message)
    return state


# =============================================================================
# IN-MEMORY TRANSPORT
# =============================================================================

class FakeTransport(Transport):
    """Thread-safe in-memory transport recording everything sent."""

    def __init__(self):
        self.inbound = deque()
        self.sent = []
        self.accept_sends = True
        self.closed = False
        self._lock = threading.Lock()

    def push(self, peer_id: int, data: bytes, channel: int = 1) -> None:
        """Queue a datagram for the bot to receive."""
        with self._lock:
            self.inbound.append((channel, peer_id, data))

    def send(self, peer_id, data, channel):
        with self._lock:
            self.sent.append((peer_id, data, channel))
            return self.accept_sends

    def poll_available(self, channel):
        with self._lock:
            for ch, _, data in self.inbound:
                if ch == channel:
                    return len(data)
        return None

    def receive(self, channel, max_size):
        with self._lock:
            for item in list(self.inbound):
                if item[0] == channel:
                    self.inbound.remove(item)
                    return item[1], item[2][:max_size]
        return None

    def sent_messages(self):
        """Decoded intents sent so far."""
        with self._lock:
            return [parse_client_message(data) for _, data, _ in self.sent]

    def close(self):
        self.closed = True


@pytest.fixture
def transport():
    return FakeTransport()
