"""
Frame codec.

Every snapshot datagram is a zlib stream. The first decompressed byte is a
mode tag:

    FRAME_KEY   (0) - the remaining bytes are the snapshot verbatim
    FRAME_DELTA (1) - the remaining bytes are added byte-wise (mod 256) to
                      the previously decoded snapshot

A delta frame can only be applied when the retained previous snapshot has
exactly the same length. Anything else is a desync: the tick is dropped and
the caller asks the server for a keyframe.
"""
import logging
import zlib
from typing import Optional

from ..errors import DesyncError, FormatError

logger = logging.getLogger(__name__)

FRAME_KEY = 0
FRAME_DELTA = 1

COMPRESSION_LEVEL = 9


def compress(data: bytes) -> bytes:
    """Compress with zlib at the level the game uses."""
    return zlib.compress(data, COMPRESSION_LEVEL)


def decompress(data: bytes) -> bytes:
    """Decompress a zlib stream.

    Raises:
        FormatError: If the stream is corrupt.
    """
    try:
        return zlib.decompress(data)
    except zlib.error as e:
        raise FormatError(f"Corrupt compressed frame ({len(data)} bytes): {e}") from e


def delta_encode(previous: bytes, current: bytes) -> bytes:
    """Byte-wise modular difference ``current - previous``."""
    if len(previous) != len(current):
        raise DesyncError(
            f"Cannot delta-encode frames of different lengths "
            f"({len(previous)} vs {len(current)})"
        )
    return bytes((c - p) & 0xFF for p, c in zip(previous, current))


def delta_decode(delta: bytes, previous: bytes) -> bytes:
    """Byte-wise modular sum ``delta + previous``."""
    if len(previous) != len(delta):
        raise DesyncError(
            f"Delta frame is {len(delta)} bytes but previous frame is {len(previous)} bytes"
        )
    return bytes((d + p) & 0xFF for d, p in zip(delta, previous))


def encode_frame(current: bytes, previous: Optional[bytes] = None) -> bytes:
    """Build a compressed datagram payload.

    Args:
        current: Snapshot bytes to send.
        previous: Snapshot the receiver already holds. If given, a delta
            frame is produced; otherwise a keyframe.
    """
    if previous is None:
        return compress(bytes([FRAME_KEY]) + current)
    return compress(bytes([FRAME_DELTA]) + delta_encode(previous, current))


class FrameDecoder:
    """Reconstructs snapshot bytes from key and delta frames.

    The decoder keeps only the last committed frame. ``decode`` never
    mutates it; the caller commits once the frame has parsed, so a frame
    that fails later in the pipeline cannot poison the next delta.
    """

    def __init__(self):
        self.last_data: Optional[bytes] = None

    def decode(self, payload: bytes) -> bytes:
        """Reconstruct the full snapshot bytes of one datagram.

        Raises:
            DesyncError: Delta frame with no retained frame, or of a
                different length than the retained frame.
            FormatError: Corrupt stream, empty frame, or unknown mode tag.
        """
        data = decompress(payload)
        if not data:
            raise FormatError("Empty frame")

        mode = data[0]
        if mode == FRAME_KEY:
            return data[1:]

        if mode == FRAME_DELTA:
            if self.last_data is None:
                raise DesyncError("Delta frame received before any keyframe")
            if len(self.last_data) != len(data) - 1:
                raise DesyncError(
                    f"Delta frame length {len(data) - 1} does not match "
                    f"retained frame length {len(self.last_data)}"
                )
            return delta_decode(data[1:], self.last_data)

        raise FormatError(f"Unknown frame mode tag: {mode}")

    def commit(self, frame: bytes) -> None:
        """Retain a successfully decoded frame as the base for the next delta."""
        self.last_data = bytes(frame)

    def reset(self) -> None:
        """Forget the retained frame; the next delta will desync."""
        if self.last_data is not None:
            logger.debug("Dropping retained frame")
        self.last_data = None


__all__ = [
    'FRAME_KEY',
    'FRAME_DELTA',
    'compress',
    'decompress',
    'delta_encode',
    'delta_decode',
    'encode_frame',
    'FrameDecoder',
]
