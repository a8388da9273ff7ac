"""
Unit tests for wire/parsers.py and wire/builders.py.

The format is positional little-endian, so most tests pin exact byte
layouts and the strictness rules (short reads, bad tags, leftovers).
"""

import io
import struct

import pytest

from nerts_bot.errors import FormatError
from nerts_bot.types import GamePhase
from nerts_bot.wire.builders import (
    build_client_message,
    build_server_message,
    write_card,
    write_list,
    write_string,
    write_u8,
)
from nerts_bot.wire.parsers import (
    parse_card,
    parse_client_message,
    parse_notification,
    parse_player,
    parse_server_message,
    read_list,
    read_string,
    read_u8,
)
from nerts_bot.wire.records import (
    NO_HOLDER,
    CardMessage,
    ClientMessage,
    NotificationMessage,
    ServerMessage,
)

from tests.conftest import make_player


class TestPrimitives:
    """Tests for the binary readers and writers."""

    def test_string_has_i32_length_prefix(self):
        buf = io.BytesIO()
        write_string(buf, "nerts")
        assert buf.getvalue() == struct.pack("<i", 5) + b"nerts"
        assert read_string(io.BytesIO(buf.getvalue())) == "nerts"

    def test_list_has_i32_count_prefix(self):
        buf = io.BytesIO()
        write_list(buf, [1, 2, 3], write_u8)
        assert buf.getvalue() == struct.pack("<i", 3) + b"\x01\x02\x03"
        assert read_list(io.BytesIO(buf.getvalue()), read_u8) == (1, 2, 3)

    def test_negative_list_count_is_format_error(self):
        with pytest.raises(FormatError):
            read_list(io.BytesIO(struct.pack("<i", -1)), read_u8)

    def test_short_read_is_format_error(self):
        with pytest.raises(FormatError):
            read_u8(io.BytesIO(b""))

    def test_string_short_body_is_format_error(self):
        with pytest.raises(FormatError):
            read_string(io.BytesIO(struct.pack("<i", 10) + b"abc"))

    def test_writer_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            write_u8(io.BytesIO(), 256)


class TestRecordLayouts:
    """Byte layouts of individual records."""

    def test_card_layout(self):
        buf = io.BytesIO()
        write_card(buf, CardMessage(x=-2, y=642, data=22, flags=5, height=0))
        assert buf.getvalue() == struct.pack("<hhBBBB", -2, 642, 22, 5, 0, NO_HOLDER)

    def test_parse_card(self):
        card = parse_card(struct.pack("<hhBBBB", 800, 642, 22, 5, 3, 1))
        assert card == CardMessage(x=800, y=642, data=22, flags=5, height=3, holder=1)

    def test_parse_notification(self):
        data = struct.pack("<QB", 76561198064411451, 2)
        assert parse_notification(data) == NotificationMessage(76561198064411451, 2)

    def test_player_layout(self):
        player = make_player(42, 554, 238, False, history_points=(18, -3), history_nertsed=(True, False))
        data = build_server_message(ServerMessage(GamePhase.LOBBY, (player,), (), ()))
        # phase + player count prefix, then the player record
        assert parse_player(data[5:]) == player

    def test_client_message_layout(self):
        message = ClientMessage(
            x=1000, y=-20, left_click=True, right_click=False, make_ready=True,
            draw=False, card_back=11, card_color=3, send_key_frame=True,
        )
        data = build_client_message(message)
        assert len(data) == 11
        assert data == struct.pack("<hh????BB?", 1000, -20, True, False, True, False, 11, 3, True)
        assert parse_client_message(data) == message


class TestServerMessage:
    """Tests for parse_server_message strictness."""

    def test_minimal_snapshot(self):
        data = bytes([2]) + struct.pack("<iii", 0, 0, 0) + b"\x00\x00\x07"
        message = parse_server_message(data)
        assert message.phase == GamePhase.PLAY
        assert message.players == ()
        assert message.notification is None
        assert message.emergency_shuffle_countdown is None
        assert message.shuffle_count == 7

    def test_optional_fields_present(self):
        data = (
            bytes([3]) + struct.pack("<iii", 0, 0, 0)
            + b"\x01" + struct.pack("<QB", 9, 1)
            + b"\x01\x05" + b"\x02"
        )
        message = parse_server_message(data)
        assert message.phase == GamePhase.NERTS
        assert message.notification == NotificationMessage(9, 1)
        assert message.emergency_shuffle_countdown == 5
        assert message.shuffle_count == 2

    def test_unknown_phase_is_format_error(self):
        data = bytes([4]) + struct.pack("<iii", 0, 0, 0) + b"\x00\x00\x00"
        with pytest.raises(FormatError):
            parse_server_message(data)

    def test_leftover_bytes_are_format_error(self):
        data = bytes([0]) + struct.pack("<iii", 0, 0, 0) + b"\x00\x00\x00" + b"\xff"
        with pytest.raises(FormatError):
            parse_server_message(data)
        assert parse_server_message(data, strict=False).shuffle_count == 0

    def test_one_byte_short_is_format_error(self, play_message):
        data = build_server_message(play_message)
        with pytest.raises(FormatError):
            parse_server_message(data[:-1])

    def test_three_player_snapshot(self, play_message):
        assert parse_server_message(build_server_message(play_message)) == play_message
