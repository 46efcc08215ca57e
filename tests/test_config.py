"""
Configuration Tests
===================
"""

import pytest
from pydantic import ValidationError

from udp_video_stream.config import Settings, load_config
from udp_video_stream.main import parse_args
from udp_video_stream.protocol import ProtocolKind
from udp_video_stream.transport import ReceivePolicy


ENV_VARS = (
    "UDP_VIDEO_CONFIG",
    "UDP_VIDEO_CODEC_QUALITY",
    "UDP_VIDEO_CODEC_SCALE",
    "UDP_VIDEO_DEST_HOST",
    "UDP_VIDEO_RECEIVE_TIMEOUT",
    "UDP_VIDEO_DISPLAY_BACKEND",
    "UDP_VIDEO_SERVER_ENABLED",
    "UDP_VIDEO_SERVER_PORT",
    "UDP_VIDEO_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        """
codec:
  quality: 40
  scale: 0.5
senders:
  - name: front
    host: 10.0.0.5
    port: 7000
    capture_backend: synthetic
    quality: 80
receivers:
  - name: back
    port: 7001
    policy: blocking
display:
  backend: headless
"""
    )
    return path


class TestDefaults:
    """Tests for built-in defaults."""

    def test_codec_defaults(self):
        settings = Settings()
        assert settings.codec.quality == 60
        assert settings.codec.scale == 0.6
        assert settings.codec.extension == ".jpg"
        assert settings.codec.protocol is ProtocolKind.RAW_IMAGE

    def test_default_channel_layout(self):
        settings = Settings()
        assert [(s.camera_index, s.port) for s in settings.senders] == [
            (0, 6000),
            (1, 5000),
            (2, 4000),
        ]
        assert [(r.port, r.window_name) for r in settings.receivers] == [
            (4000, "Streaming Video 0"),
            (5000, "Streaming Video 1"),
            (6000, "Streaming Video 2"),
        ]

    def test_receiver_defaults(self):
        receiver = Settings().receivers[0]
        assert receiver.policy is ReceivePolicy.TIMEOUT_FALLBACK
        assert receiver.timeout_seconds == 1.0

    def test_display_and_server_defaults(self):
        settings = Settings()
        assert settings.display.delay_ms == 15
        assert settings.server.enabled is False


class TestLoadConfig:
    """Tests for load_config."""

    def test_loads_yaml(self, config_file):
        settings = load_config(str(config_file))

        assert settings.codec.quality == 40
        assert settings.senders[0].host == "10.0.0.5"
        assert settings.senders[0].quality == 80
        assert settings.receivers[0].policy is ReceivePolicy.BLOCKING
        assert settings.display.backend == "headless"

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "nope.yaml"))
        assert settings.codec.quality == 60
        assert len(settings.senders) == 3

    def test_config_path_from_env(self, monkeypatch, config_file):
        monkeypatch.setenv("UDP_VIDEO_CONFIG", str(config_file))
        assert load_config().codec.quality == 40

    def test_env_overrides_yaml(self, monkeypatch, config_file):
        monkeypatch.setenv("UDP_VIDEO_CODEC_QUALITY", "25")
        monkeypatch.setenv("UDP_VIDEO_DEST_HOST", "192.168.43.168")
        monkeypatch.setenv("UDP_VIDEO_RECEIVE_TIMEOUT", "0.25")
        monkeypatch.setenv("UDP_VIDEO_SERVER_ENABLED", "true")
        monkeypatch.setenv("UDP_VIDEO_SERVER_PORT", "9090")
        monkeypatch.setenv("UDP_VIDEO_LOG_LEVEL", "DEBUG")

        settings = load_config(str(config_file))

        assert settings.codec.quality == 25
        assert settings.senders[0].host == "192.168.43.168"
        assert settings.receivers[0].timeout_seconds == 0.25
        assert settings.server.enabled is True
        assert settings.server.port == 9090
        assert settings.logging.level == "DEBUG"

    def test_dest_host_applies_to_default_senders(self, monkeypatch, tmp_path):
        monkeypatch.setenv("UDP_VIDEO_DEST_HOST", "10.1.1.1")
        settings = load_config(str(tmp_path / "nope.yaml"))

        assert [s.host for s in settings.senders] == ["10.1.1.1"] * 3
        assert [s.port for s in settings.senders] == [6000, 5000, 4000]


class TestValidation:
    """Tests for configuration validation."""

    def test_rejects_quality_out_of_range(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"codec": {"quality": 0}})

    def test_rejects_scale_above_one(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"codec": {"scale": 1.5}})

    def test_rejects_unknown_policy(self):
        with pytest.raises(ValidationError):
            Settings.model_validate(
                {"receivers": [{"name": "r", "port": 4000, "policy": "sometimes"}]}
            )

    def test_rejects_duplicate_names(self):
        with pytest.raises(ValidationError):
            Settings.model_validate(
                {"senders": [{"name": "a", "port": 4000}, {"name": "a", "port": 5000}]}
            )

    def test_rejects_shared_listen_port(self):
        with pytest.raises(ValidationError):
            Settings.model_validate(
                {"receivers": [{"name": "a", "port": 4000}, {"name": "b", "port": 4000}]}
            )

    def test_same_port_on_different_hosts_allowed(self):
        settings = Settings.model_validate(
            {
                "receivers": [
                    {"name": "a", "host": "127.0.0.1", "port": 4000},
                    {"name": "b", "host": "127.0.0.2", "port": 4000},
                ]
            }
        )
        assert len(settings.receivers) == 2

    def test_wildcard_host_collides_with_specific_host(self):
        with pytest.raises(ValidationError):
            Settings.model_validate(
                {
                    "receivers": [
                        {"name": "a", "host": "0.0.0.0", "port": 4000},
                        {"name": "b", "host": "127.0.0.1", "port": 4000},
                    ]
                }
            )


class TestExplicitConfigPath:
    """Tests for loading an explicit file next to a broken default one."""

    def test_module_has_no_import_time_settings(self):
        import udp_video_stream.config as config_module

        assert not hasattr(config_module, "settings")

    def test_explicit_path_ignores_invalid_cwd_config(self, monkeypatch, tmp_path):
        (tmp_path / "config.yaml").write_text("codec:\n  quality: 500\n")
        good = tmp_path / "good.yaml"
        good.write_text("codec:\n  quality: 70\n")
        monkeypatch.chdir(tmp_path)

        args = parse_args(["--config", str(good), "receive"])
        settings = load_config(args.config)

        assert settings.codec.quality == 70

    def test_default_lookup_reports_invalid_cwd_config(self, monkeypatch, tmp_path):
        (tmp_path / "config.yaml").write_text("codec:\n  quality: 500\n")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ValidationError):
            load_config()
