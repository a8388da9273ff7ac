"""
Integration tests for the threaded Bot runtime.

Runs the real receive and send threads against the in-memory transport
from conftest. Timeouts are short so a hung test fails fast.
"""

import threading
import time
from dataclasses import replace

import pytest

from nerts_bot.bot.decision import DecisionEngine
from nerts_bot.bot.runtime import Bot
from nerts_bot.config import BotConfig
from nerts_bot.errors import FormatError, TransportError
from nerts_bot.wire import build_server_message, encode_frame
from nerts_bot.wire.records import CardMessage

from tests.conftest import ACE_OF_DIAMONDS, FACE_UP, LOCAL_ID, SERVER_ID, with_cards

FAST = BotConfig(send_interval=0.02, poll_interval=0.005, wait_timeout=0.2, idle_timeout=0.02)


def eventually(condition, timeout=2.0):
    """Poll ``condition`` until it holds or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


@pytest.fixture
def bot(transport):
    bot = Bot(transport, LOCAL_ID, FAST)
    yield bot
    bot.stop()


# =============================================================================
# INBOUND
# =============================================================================

class TestInbound:
    """Snapshots flowing from the transport into the state."""

    def test_keyframe_is_applied(self, bot, transport, play_message):
        bot.start()
        bot.connect(SERVER_ID)
        transport.push(SERVER_ID, encode_frame(build_server_message(play_message)))

        assert bot.wait_until(lambda s: s.initialized, timeout=2.0)
        with bot.locked() as state:
            assert state.number_playing() == 3
        assert bot.tick == 1

    def test_delta_is_applied(self, bot, transport, play_message):
        first = build_server_message(play_message)
        second = build_server_message(replace(play_message, shuffle_count=4))
        bot.start()
        bot.connect(SERVER_ID)
        transport.push(SERVER_ID, encode_frame(first))
        transport.push(SERVER_ID, encode_frame(second, previous=first))

        assert bot.wait_until(lambda s: s.shuffle_count == 4, timeout=2.0)
        assert bot.frames.last_data == second

    def test_foreign_peer_is_ignored(self, bot, play_message):
        bot.connect(SERVER_ID)
        assert not bot.handle_packet(SERVER_ID + 1, encode_frame(build_server_message(play_message)))
        assert not bot.state.initialized

    def test_desync_requests_keyframe(self, bot, play_message):
        data = build_server_message(play_message)
        bot.connect(SERVER_ID)
        bot.create_client_message()

        assert not bot.handle_packet(SERVER_ID, encode_frame(data, previous=data))
        assert bot.state.send_key_frame
        assert bot.tick == 0
        assert not bot.state.initialized

    def test_desync_is_reported(self, bot, play_message, monkeypatch):
        reported = []
        monkeypatch.setattr(
            "nerts_bot.bot.runtime.capture_message",
            lambda message, level="info": reported.append((message, level)),
        )
        data = build_server_message(play_message)
        bot.connect(SERVER_ID)

        bot.handle_packet(SERVER_ID, encode_frame(data, previous=data))

        assert len(reported) == 1
        assert reported[0][1] == "warning"
        assert "keyframe" in reported[0][0]

    def test_format_error_is_fatal(self, bot, transport, play_message):
        data = build_server_message(play_message)
        bot.start()
        bot.connect(SERVER_ID)
        transport.push(SERVER_ID, encode_frame(data[:-1]))

        assert eventually(lambda: not bot.is_running())
        assert isinstance(bot.fatal_error, FormatError)
        assert not bot.state.initialized
        assert bot.frames.last_data is None


# =============================================================================
# OUTBOUND
# =============================================================================

class TestOutbound:
    """Intents flowing from the state to the transport."""

    def test_connect_sends_keyframe_request(self, bot, transport):
        bot.start()
        bot.connect(SERVER_ID)

        assert eventually(lambda: transport.sent)
        peer_id, _, channel = transport.sent[0]
        assert peer_id == SERVER_ID
        assert channel == 2
        assert transport.sent_messages()[0].send_key_frame

    def test_one_shot_flags_sent_once(self, bot, transport):
        bot.start()
        bot.connect(SERVER_ID)
        with bot.locked() as state:
            state.send_draw = True
        bot.request_send()

        assert eventually(lambda: len(transport.sent) >= 4)
        draws = [m for m in transport.sent_messages() if m.draw]
        assert len(draws) == 1

    def test_nothing_sent_before_connect(self, bot, transport):
        bot.start()
        bot.request_send()
        time.sleep(0.1)
        assert transport.sent == []

    def test_refused_send_is_fatal(self, bot, transport):
        transport.accept_sends = False
        bot.start()
        bot.connect(SERVER_ID)

        assert eventually(lambda: not bot.is_running())
        assert isinstance(bot.fatal_error, TransportError)


# =============================================================================
# WAITING AND SHUTDOWN
# =============================================================================

class TestWaiting:
    def test_wait_until_times_out(self, bot):
        start = time.monotonic()
        assert not bot.wait_until(lambda s: False, timeout=0.05)
        assert time.monotonic() - start < 1.0

    def test_wait_for_update_times_out_without_ticks(self, bot):
        assert not bot.wait_for_update(timeout=0.05)

    def test_stop_wakes_waiters(self, bot):
        result = {}

        def waiter():
            result["value"] = bot.wait_until(lambda s: False, timeout=10.0)

        thread = threading.Thread(target=waiter)
        bot.start()
        thread.start()
        time.sleep(0.05)
        bot.stop()
        thread.join(2.0)

        assert not thread.is_alive()
        assert result["value"] is False
        assert not bot.is_running()


# =============================================================================
# DECISION ENGINE
# =============================================================================

class TestEngineLoop:
    """DecisionEngine.run against a live bot."""

    def test_plays_held_ace(self, bot, transport, play_message):
        message = with_cards(play_message, CardMessage(3000, 1000, ACE_OF_DIAMONDS, FACE_UP, 0, 0))
        bot.start()
        bot.connect(SERVER_ID)
        transport.push(SERVER_ID, encode_frame(build_server_message(message)))

        engine = threading.Thread(target=DecisionEngine(bot).run, daemon=True)
        engine.start()
        try:
            assert eventually(lambda: any(m.left_click for m in transport.sent_messages()))
        finally:
            bot.stop()
            engine.join(2.0)

        sent = transport.sent_messages()
        assert sent[0].send_key_frame or sent[0].make_ready
        assert any(m.make_ready for m in sent)
        click = next(m for m in sent if m.left_click)
        assert 977 <= click.x < 1017
        assert 1112 <= click.y < 1182
        assert not engine.is_alive()

    def test_run_reraises_fatal_error(self, bot, transport, play_message):
        data = build_server_message(play_message)
        bot.start()
        bot.connect(SERVER_ID)
        transport.push(SERVER_ID, encode_frame(data + b"\x00"))

        with pytest.raises(FormatError):
            DecisionEngine(bot).run()
