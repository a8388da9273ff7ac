"""
Snapshot parsers.

Parse reconstructed snapshot bytes from the game server into typed records.

Layout rules (little-endian, positional):
- fixed-width integers are read directly
- bool: 1 byte, zero / nonzero
- string: i32 byte length + UTF-8 bytes
- list: i32 element count + elements
- optional: 1 byte presence flag + value if present

Decoding is strict. A short read, a negative length, an unknown phase tag or
bytes left over after the snapshot all raise FormatError.
"""
import io
import struct
from typing import BinaryIO, Callable, Optional, Tuple, TypeVar, Union

from ..errors import FormatError
from ..types import GamePhase
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
# BINARY READERS
# =============================================================================

def _read(buf: BinaryIO, fmt: str) -> int:
    size = struct.calcsize(fmt)
    raw = buf.read(size)
    if len(raw) != size:
        raise FormatError(
            f"Short read at offset {buf.tell() - len(raw)}: "
            f"wanted {size} bytes for '{fmt}', got {len(raw)}"
        )
    return struct.unpack(fmt, raw)[0]


def read_u8(buf: BinaryIO) -> int:
    return _read(buf, "<B")


def read_i8(buf: BinaryIO) -> int:
    return _read(buf, "<b")


def read_i16(buf: BinaryIO) -> int:
    return _read(buf, "<h")


def read_u32(buf: BinaryIO) -> int:
    return _read(buf, "<I")


def read_i32(buf: BinaryIO) -> int:
    return _read(buf, "<i")


def read_u64(buf: BinaryIO) -> int:
    return _read(buf, "<Q")


def read_bool(buf: BinaryIO) -> bool:
    return read_u8(buf) != 0


def read_bytes(buf: BinaryIO, length: int) -> bytes:
    raw = buf.read(length)
    if len(raw) != length:
        raise FormatError(f"Short read: wanted {length} bytes, got {len(raw)}")
    return raw


def read_string(buf: BinaryIO) -> str:
    length = read_i32(buf)
    if length < 0:
        raise FormatError(f"Negative string length: {length}")
    try:
        return read_bytes(buf, length).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Invalid UTF-8 in string: {e}") from e


def read_list(buf: BinaryIO, read_item: Callable[[BinaryIO], T]) -> Tuple[T, ...]:
    count = read_i32(buf)
    if count < 0:
        raise FormatError(f"Negative list count: {count}")
    return tuple(read_item(buf) for _ in range(count))


def read_optional(buf: BinaryIO, read_item: Callable[[BinaryIO], T]) -> Optional[T]:
    if read_bool(buf):
        return read_item(buf)
    return None


def remaining(buf: BinaryIO) -> int:
    """Number of unread bytes left in a seekable buffer."""
    pos = buf.tell()
    end = buf.seek(0, io.SEEK_END)
    buf.seek(pos)
    return end - pos


# =============================================================================
# RECORD PARSERS
# =============================================================================

def _as_buffer(data: Union[bytes, BinaryIO]) -> BinaryIO:
    return io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data


def parse_card(data: Union[bytes, BinaryIO]) -> CardMessage:
    """Parse a loose card record (8 bytes)."""
    buf = _as_buffer(data)
    return CardMessage(
        x=read_i16(buf),
        y=read_i16(buf),
        data=read_u8(buf),
        flags=read_u8(buf),
        height=read_u8(buf),
        holder=read_u8(buf),
    )


def parse_card_outline(data: Union[bytes, BinaryIO]) -> CardOutlineMessage:
    """Parse a center outline record (4 bytes)."""
    buf = _as_buffer(data)
    return CardOutlineMessage(x=read_i16(buf), y=read_i16(buf))


def parse_notification(data: Union[bytes, BinaryIO]) -> NotificationMessage:
    """Parse a notification record (9 bytes)."""
    buf = _as_buffer(data)
    return NotificationMessage(player_id=read_u64(buf), notification_type=read_u8(buf))


def parse_player(data: Union[bytes, BinaryIO]) -> PlayerMessage:
    """Parse a player record."""
    buf = _as_buffer(data)
    return PlayerMessage(
        player_id=read_u64(buf),
        origin_x=read_i16(buf),
        origin_y=read_i16(buf),
        flipped=read_bool(buf),
        is_playing=read_bool(buf),
        is_ready=read_bool(buf),
        can_call_nerts=read_bool(buf),
        show_deck_button=read_bool(buf),
        effects=read_u32(buf),
        card_color=read_u8(buf),
        tableau_count=read_u8(buf),
        called_nerts=read_bool(buf),
        nerts_cards=read_u8(buf),
        holding_nerts_card=read_bool(buf),
        points_cards=read_u8(buf),
        total_score=read_i16(buf),
        history_points=read_list(buf, read_i8),
        history_nertsed=read_list(buf, read_bool),
        ignore_disable_foundation=read_bool(buf),
        cursor_x=read_i16(buf),
        cursor_y=read_i16(buf),
    )


def parse_server_message(data: Union[bytes, BinaryIO], strict: bool = True) -> ServerMessage:
    """Parse a full snapshot.

    Args:
        data: Reconstructed snapshot bytes (mode tag already stripped).
        strict: If True, leftover bytes after the snapshot are an error.

    Raises:
        FormatError: On any deviation from the wire layout.
    """
    buf = _as_buffer(data)

    message = ServerMessage(
        phase=GamePhase.from_code(read_u8(buf)),
        players=read_list(buf, parse_player),
        cards=read_list(buf, parse_card),
        card_outlines=read_list(buf, parse_card_outline),
        notification=read_optional(buf, parse_notification),
        emergency_shuffle_countdown=read_optional(buf, read_u8),
        shuffle_count=read_u8(buf),
    )

    if strict:
        leftover = remaining(buf)
        if leftover:
            raise FormatError(f"{leftover} unread bytes after snapshot")

    return message


def parse_client_message(data: Union[bytes, BinaryIO]) -> ClientMessage:
    """Parse an outbound intent (used by relays and tests)."""
    buf = _as_buffer(data)
    return ClientMessage(
        x=read_i16(buf),
        y=read_i16(buf),
        left_click=read_bool(buf),
        right_click=read_bool(buf),
        make_ready=read_bool(buf),
        draw=read_bool(buf),
        card_back=read_u8(buf),
        card_color=read_u8(buf),
        send_key_frame=read_bool(buf),
    )


__all__ = [
    'read_u8', 'read_i8', 'read_i16', 'read_u32', 'read_i32',
    'read_u64', 'read_bool', 'read_bytes', 'read_string', 'read_list',
    'read_optional', 'remaining',
    'parse_card', 'parse_card_outline', 'parse_notification', 'parse_player',
    'parse_server_message', 'parse_client_message',
]
