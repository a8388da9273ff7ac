"""
Tests for cli.py argument handling and sentry_config.py without a DSN.
"""

import argparse

import pytest

from nerts_bot import cli, sentry_config


class TestParseAddress:
    def test_host_and_port(self):
        assert cli.parse_address("127.0.0.1:27015") == ("127.0.0.1", 27015)

    def test_empty_host_binds_any(self):
        assert cli.parse_address(":9000") == ("0.0.0.0", 9000)

    @pytest.mark.parametrize("value", ["localhost", "host:port", "host:"])
    def test_rejects_bad_values(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_address(value)


class TestParser:
    def test_required_arguments(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_ids_accept_hex(self):
        args = cli.build_parser().parse_args(
            ["--server-id", "0x10", "--local-id", "42", "--peer", "relay:1"]
        )
        assert args.server_id == 16
        assert args.local_id == 42
        assert args.peer == ("relay", 1)
        assert args.bind == ("0.0.0.0", 0)
        assert args.wait_timeout is None
        assert not args.verbose


class TestMain:
    def test_invalid_config_exits_before_connecting(self, monkeypatch):
        monkeypatch.setattr("nerts_bot.config.load_dotenv", lambda: False)
        monkeypatch.setattr("nerts_bot.sentry_config.load_dotenv", lambda: False)
        monkeypatch.delenv("SENTRY_DSN", raising=False)
        monkeypatch.setenv("NERTS_WAIT_TIMEOUT", "-1")

        def no_transport(*args, **kwargs):
            raise AssertionError("transport should not be created")

        monkeypatch.setattr(cli, "UdpTransport", no_transport)
        assert cli.main(["--server-id", "1", "--local-id", "2", "--peer", "127.0.0.1:9"]) == 2

    def test_unresolvable_relay_exits(self, monkeypatch):
        monkeypatch.setattr("nerts_bot.config.load_dotenv", lambda: False)
        monkeypatch.setattr("nerts_bot.sentry_config.load_dotenv", lambda: False)
        monkeypatch.delenv("SENTRY_DSN", raising=False)
        assert cli.main(["--server-id", "1", "--local-id", "2", "--peer", "relay.invalid:9"]) == 1


class TestSentryConfig:
    def test_init_without_dsn(self, monkeypatch):
        monkeypatch.setattr("nerts_bot.sentry_config.load_dotenv", lambda: False)
        monkeypatch.delenv("SENTRY_DSN", raising=False)
        assert sentry_config.init_sentry() is False

    def test_capture_without_client_is_noop(self):
        sentry_config.capture_exception(ValueError("boom"), context={"activity": "receive"})
        sentry_config.capture_message("hello")
