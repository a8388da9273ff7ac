"""
Wire layer: frame codec, snapshot parsers and message builders.

This module provides:
- Typed records for every message (records.py)
- Strict little-endian parsers (parsers.py)
- Builders for the same layout (builders.py)
- Key/delta frame reconstruction (frames.py)
"""

from .records import (
    NO_HOLDER,
    CardMessage,
    CardOutlineMessage,
    NotificationMessage,
    PlayerMessage,
    ServerMessage,
    ClientMessage,
)

from .parsers import (
    parse_card,
    parse_card_outline,
    parse_notification,
    parse_player,
    parse_server_message,
    parse_client_message,
)

from .builders import (
    build_client_message,
    build_server_message,
)

from .frames import (
    FRAME_KEY,
    FRAME_DELTA,
    compress,
    decompress,
    delta_encode,
    delta_decode,
    encode_frame,
    FrameDecoder,
)

__all__ = [
    # Records
    'NO_HOLDER', 'CardMessage', 'CardOutlineMessage', 'NotificationMessage',
    'PlayerMessage', 'ServerMessage', 'ClientMessage',
    # Parsers
    'parse_card', 'parse_card_outline', 'parse_notification', 'parse_player',
    'parse_server_message', 'parse_client_message',
    # Builders
    'build_client_message', 'build_server_message',
    # Frames
    'FRAME_KEY', 'FRAME_DELTA', 'compress', 'decompress', 'delta_encode',
    'delta_decode', 'encode_frame', 'FrameDecoder',
]
