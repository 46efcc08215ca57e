"""
Command Line Tests
==================
"""

import pytest

from udp_video_stream.config import Settings
from udp_video_stream.main import _apply_cli_overrides, parse_args


class TestParseArgs:
    """Tests for argument parsing."""

    @pytest.mark.parametrize("command", ["send", "receive", "run"])
    def test_commands(self, command):
        assert parse_args([command]).command == command

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            parse_args(["relay"])

    def test_options(self):
        args = parse_args(
            ["--config", "x.yaml", "--log-level", "DEBUG", "receive", "--serve", "--headless"]
        )
        assert args.config == "x.yaml"
        assert args.log_level == "DEBUG"
        assert args.serve and args.headless


class TestCliOverrides:
    """Tests for applying CLI flags on top of loaded settings."""

    def test_no_flags_keeps_settings(self):
        settings = Settings()
        assert _apply_cli_overrides(settings, parse_args(["run"])) is settings

    def test_flags_override(self):
        settings = Settings()
        updated = _apply_cli_overrides(
            settings, parse_args(["--log-level", "DEBUG", "send", "--serve", "--headless"])
        )

        assert updated.logging.level == "DEBUG"
        assert updated.server.enabled is True
        assert updated.display.backend == "headless"
        assert settings.server.enabled is False
