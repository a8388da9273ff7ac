"""
Typed wire records.

One frozen dataclass per record type exchanged with the game server. The
field order of each dataclass IS the wire order: the format is positional,
not self-describing, so reordering a field here breaks decoding.

Server -> client (snapshot):
    ServerMessage
        phase                        u8 (GamePhase)
        players                      list<PlayerMessage>
        cards                        list<CardMessage>
        card_outlines                list<CardOutlineMessage>
        notification                 optional<NotificationMessage>
        emergency_shuffle_countdown  optional<u8>
        shuffle_count                u8

Client -> server (intent):
    ClientMessage
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..types import GamePhase

# Holder byte meaning "not held by anyone"
NO_HOLDER = 255


@dataclass(frozen=True)
class CardMessage:
    """A loose card on the board.

    Attributes:
        x, y: Board position of the card.
        data: Card code (0 = unknown face, see state.card.CardFace.from_code).
        flags: Bit field, see state.card.CardFlags.
        height: Stack height under the card.
        holder: Active seat holding the card, or NO_HOLDER.
    """
    x: int
    y: int
    data: int
    flags: int
    height: int
    holder: int = NO_HOLDER


@dataclass(frozen=True)
class CardOutlineMessage:
    """An empty-slot outline marking a center (foundation) pile."""
    x: int
    y: int


@dataclass(frozen=True)
class NotificationMessage:
    """A transient notification about a player (e.g. someone called nerts)."""
    player_id: int
    notification_type: int


@dataclass(frozen=True)
class PlayerMessage:
    """Per-player record sent every tick."""
    player_id: int
    origin_x: int
    origin_y: int
    flipped: bool
    is_playing: bool
    is_ready: bool
    can_call_nerts: bool
    show_deck_button: bool
    effects: int
    card_color: int
    tableau_count: int
    called_nerts: bool
    nerts_cards: int
    holding_nerts_card: bool
    points_cards: int
    total_score: int
    history_points: Tuple[int, ...]
    history_nertsed: Tuple[bool, ...]
    ignore_disable_foundation: bool
    cursor_x: int
    cursor_y: int


@dataclass(frozen=True)
class ServerMessage:
    """A full game snapshot for one tick."""
    phase: GamePhase
    players: Tuple[PlayerMessage, ...]
    cards: Tuple[CardMessage, ...]
    card_outlines: Tuple[CardOutlineMessage, ...]
    notification: Optional[NotificationMessage] = None
    emergency_shuffle_countdown: Optional[int] = None
    shuffle_count: int = 0


@dataclass(frozen=True)
class ClientMessage:
    """The bot's intent for one send.

    ``make_ready`` doubles as "call nerts" during play; the server reads it
    according to the current phase.
    """
    x: int
    y: int
    left_click: bool = False
    right_click: bool = False
    make_ready: bool = False
    draw: bool = False
    card_back: int = 0
    card_color: int = 0
    send_key_frame: bool = False


__all__ = [
    'NO_HOLDER',
    'CardMessage',
    'CardOutlineMessage',
    'NotificationMessage',
    'PlayerMessage',
    'ServerMessage',
    'ClientMessage',
]
