"""
Message builders.

Serialize records into the little-endian positional layout read by
wire.parsers. The bot only ever sends ClientMessage; the server-side
builders exist so snapshots can be produced for relays, fixtures and tests.

ClientMessage layout (11 bytes, never compressed):
    x i16 | y i16 | left_click bool | right_click bool | make_ready bool |
    draw bool | card_back u8 | card_color u8 | send_key_frame bool
"""
import io
import struct
from typing import BinaryIO, Callable, Iterable, Optional, TypeVar

from .records import (
    CardMessage,
    CardOutlineMessage,
    NotificationMessage,
    PlayerMessage,
    ServerMessage,
    ClientMessage,
)

T = TypeVar("T")


# =============================================================================
# BINARY WRITERS
# =============================================================================

def _write(buf: BinaryIO, fmt: str, value: int) -> None:
    try:
        buf.write(struct.pack(fmt, value))
    except struct.error as e:
        raise ValueError(f"Value {value!r} does not fit '{fmt}': {e}") from e


def write_u8(buf: BinaryIO, value: int) -> None:
    _write(buf, "<B", value)


def write_i8(buf: BinaryIO, value: int) -> None:
    _write(buf, "<b", value)


def write_i16(buf: BinaryIO, value: int) -> None:
    _write(buf, "<h", value)


def write_u32(buf: BinaryIO, value: int) -> None:
    _write(buf, "<I", value)


def write_i32(buf: BinaryIO, value: int) -> None:
    _write(buf, "<i", value)


def write_u64(buf: BinaryIO, value: int) -> None:
    _write(buf, "<Q", value)


def write_bool(buf: BinaryIO, value: bool) -> None:
    write_u8(buf, 1 if value else 0)


def write_string(buf: BinaryIO, value: str) -> None:
    encoded = value.encode("utf-8")
    write_i32(buf, len(encoded))
    buf.write(encoded)


def write_list(buf: BinaryIO, items: Iterable[T], write_item: Callable[[BinaryIO, T], None]) -> None:
    items = list(items)
    write_i32(buf, len(items))
    for item in items:
        write_item(buf, item)


def write_optional(buf: BinaryIO, value: Optional[T], write_item: Callable[[BinaryIO, T], None]) -> None:
    write_bool(buf, value is not None)
    if value is not None:
        write_item(buf, value)


# =============================================================================
# RECORD WRITERS
# =============================================================================

def write_card(buf: BinaryIO, card: CardMessage) -> None:
    write_i16(buf, card.x)
    write_i16(buf, card.y)
    write_u8(buf, card.data)
    write_u8(buf, card.flags)
    write_u8(buf, card.height)
    write_u8(buf, card.holder)


def write_card_outline(buf: BinaryIO, outline: CardOutlineMessage) -> None:
    write_i16(buf, outline.x)
    write_i16(buf, outline.y)


def write_notification(buf: BinaryIO, notification: NotificationMessage) -> None:
    write_u64(buf, notification.player_id)
    write_u8(buf, notification.notification_type)


def write_player(buf: BinaryIO, player: PlayerMessage) -> None:
    write_u64(buf, player.player_id)
    write_i16(buf, player.origin_x)
    write_i16(buf, player.origin_y)
    write_bool(buf, player.flipped)
    write_bool(buf, player.is_playing)
    write_bool(buf, player.is_ready)
    write_bool(buf, player.can_call_nerts)
    write_bool(buf, player.show_deck_button)
    write_u32(buf, player.effects)
    write_u8(buf, player.card_color)
    write_u8(buf, player.tableau_count)
    write_bool(buf, player.called_nerts)
    write_u8(buf, player.nerts_cards)
    write_bool(buf, player.holding_nerts_card)
    write_u8(buf, player.points_cards)
    write_i16(buf, player.total_score)
    write_list(buf, player.history_points, write_i8)
    write_list(buf, player.history_nertsed, write_bool)
    write_bool(buf, player.ignore_disable_foundation)
    write_i16(buf, player.cursor_x)
    write_i16(buf, player.cursor_y)


def write_server_message(buf: BinaryIO, message: ServerMessage) -> None:
    write_u8(buf, int(message.phase))
    write_list(buf, message.players, write_player)
    write_list(buf, message.cards, write_card)
    write_list(buf, message.card_outlines, write_card_outline)
    write_optional(buf, message.notification, write_notification)
    write_optional(buf, message.emergency_shuffle_countdown, write_u8)
    write_u8(buf, message.shuffle_count)


def write_client_message(buf: BinaryIO, message: ClientMessage) -> None:
    write_i16(buf, message.x)
    write_i16(buf, message.y)
    write_bool(buf, message.left_click)
    write_bool(buf, message.right_click)
    write_bool(buf, message.make_ready)
    write_bool(buf, message.draw)
    write_u8(buf, message.card_back)
    write_u8(buf, message.card_color)
    write_bool(buf, message.send_key_frame)


# =============================================================================
# TOP-LEVEL BUILDERS
# =============================================================================

def build_client_message(message: ClientMessage) -> bytes:
    """Serialize an intent for sending to the server."""
    buf = io.BytesIO()
    write_client_message(buf, message)
    return buf.getvalue()


def build_server_message(message: ServerMessage) -> bytes:
    """Serialize a snapshot (without the frame mode tag)."""
    buf = io.BytesIO()
    write_server_message(buf, message)
    return buf.getvalue()


__all__ = [
    'write_u8', 'write_i8', 'write_i16', 'write_u32', 'write_i32',
    'write_u64', 'write_bool', 'write_string', 'write_list', 'write_optional',
    'write_card', 'write_card_outline', 'write_notification', 'write_player',
    'write_server_message', 'write_client_message',
    'build_client_message', 'build_server_message',
]
