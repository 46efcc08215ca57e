"""
udp-video-stream Configuration
==============================

This module handles configuration loading for the streaming channels.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    UDP_VIDEO_CONFIG           -> path of the YAML file to load
    UDP_VIDEO_DEST_HOST        -> senders[*].host
    UDP_VIDEO_CODEC_QUALITY    -> codec.quality
    UDP_VIDEO_CODEC_SCALE      -> codec.scale
    UDP_VIDEO_RECEIVE_TIMEOUT  -> receivers[*].timeout_seconds
    UDP_VIDEO_DISPLAY_BACKEND  -> display.backend
    UDP_VIDEO_SERVER_ENABLED   -> server.enabled
    UDP_VIDEO_SERVER_PORT      -> server.port
    UDP_VIDEO_LOG_LEVEL        -> logging.level

Channel configuration is fixed at startup; nothing is reconfigurable while
channels are running.

Example:
    from udp_video_stream.config import load_config

    settings = load_config("config.yaml")
    for receiver in settings.receivers:
        print(receiver.name, receiver.port, receiver.policy)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from udp_video_stream.protocol.envelope import ProtocolKind
from udp_video_stream.transport.sockets import ReceivePolicy


logger = logging.getLogger(__name__)


# Bind address meaning "all interfaces".
WILDCARD_HOST = "0.0.0.0"


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="udp-video-stream", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class CodecConfig(BaseModel):
    """Default frame codec settings, shared by all channels."""

    extension: str = Field(
        default=".jpg",
        description="Image container: '.jpg' or '.webp'",
    )
    quality: int = Field(
        default=60,
        ge=1,
        le=100,
        description="Compression quality",
    )
    scale: float = Field(
        default=0.6,
        gt=0,
        le=1.0,
        description="Downscale factor applied before compression (0, 1]",
    )
    protocol: ProtocolKind = Field(
        default=ProtocolKind.RAW_IMAGE,
        description="Wire format",
    )


class SenderChannelConfig(BaseModel):
    """One camera streamed to one destination."""

    name: str = Field(..., description="Channel name")
    host: str = Field(default="127.0.0.1", description="Destination address")
    port: int = Field(..., ge=1, le=65535, description="Destination port")
    camera_index: int = Field(default=0, ge=0, description="Capture device index")
    capture_backend: str = Field(
        default="camera",
        description="Capture backend: 'camera' or 'synthetic'",
    )
    synthetic_width: int = Field(default=640, ge=16, description="Synthetic frame width")
    synthetic_height: int = Field(default=480, ge=16, description="Synthetic frame height")
    synthetic_fps: float = Field(default=30.0, ge=0, description="Synthetic frame rate")
    show_preview: bool = Field(default=False, description="Show the captured video locally")
    scale: Optional[float] = Field(
        default=None,
        gt=0,
        le=1.0,
        description="Per-channel override of codec.scale",
    )
    quality: Optional[int] = Field(
        default=None,
        ge=1,
        le=100,
        description="Per-channel override of codec.quality",
    )
    overlay_clock: bool = Field(default=True, description="Stamp capture time on frames")
    clock_offset_ms: int = Field(
        default=0,
        description="Milliseconds added to the stamped capture time",
    )


class ReceiverChannelConfig(BaseModel):
    """One listen port shown in one window."""

    name: str = Field(..., description="Channel name")
    window_name: Optional[str] = Field(
        default=None,
        description="Display window name (defaults to the channel name)",
    )
    host: str = Field(default="0.0.0.0", description="Local bind address")
    port: int = Field(..., ge=1, le=65535, description="Listen port")
    policy: ReceivePolicy = Field(
        default=ReceivePolicy.TIMEOUT_FALLBACK,
        description="'blocking' or 'timeout_fallback'",
    )
    timeout_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Receive timeout before the placeholder is shown",
    )
    overlay_clock: bool = Field(default=True, description="Stamp display time on frames")
    placeholder_path: Optional[str] = Field(
        default=None,
        description="Image shown when no frame arrives (generated if unset)",
    )


class DisplayConfig(BaseModel):
    """Display backend configuration."""

    backend: str = Field(
        default="opencv",
        description="Display backend: 'opencv' or 'headless'",
    )
    delay_ms: int = Field(
        default=15,
        ge=0,
        description="Delay after each redraw in milliseconds",
    )
    placeholder_width: int = Field(default=640, ge=16, description="Generated placeholder width")
    placeholder_height: int = Field(default=480, ge=16, description="Generated placeholder height")


class ServerConfig(BaseModel):
    """Status server configuration."""

    enabled: bool = Field(default=False, description="Serve the HTTP status API")
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


def _default_senders() -> List[SenderChannelConfig]:
    return [
        SenderChannelConfig(name="camera-0", port=6000, camera_index=0),
        SenderChannelConfig(name="camera-1", port=5000, camera_index=1),
        SenderChannelConfig(name="camera-2", port=4000, camera_index=2),
    ]


def _default_receivers() -> List[ReceiverChannelConfig]:
    return [
        ReceiverChannelConfig(name="receiver-0", port=4000, window_name="Streaming Video 0"),
        ReceiverChannelConfig(name="receiver-1", port=5000, window_name="Streaming Video 1"),
        ReceiverChannelConfig(name="receiver-2", port=6000, window_name="Streaming Video 2"),
    ]


class Settings(BaseModel):
    """
    Main settings class for udp-video-stream.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    senders: List[SenderChannelConfig] = Field(default_factory=_default_senders)
    receivers: List[ReceiverChannelConfig] = Field(default_factory=_default_receivers)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _check_channels(self) -> "Settings":
        for role, channels in (("sender", self.senders), ("receiver", self.receivers)):
            names = [channel.name for channel in channels]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate {role} channel names: {names}")

        # 0.0.0.0 binds every interface, so it collides with any host on that port.
        listen = [(r.host, r.port) for r in self.receivers]
        for i, (host, port) in enumerate(listen):
            for other_host, other_port in listen[i + 1:]:
                if port == other_port and (
                    host == other_host or WILDCARD_HOST in (host, other_host)
                ):
                    raise ValueError(f"Receivers must listen on distinct ports: {listen}")
        return self


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, uses UDP_VIDEO_CONFIG or
            searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        config_path = os.environ.get("UDP_VIDEO_CONFIG")
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    # Build settings object
    settings = Settings.model_validate(config_data)

    return settings


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Codec settings
    if env_quality := os.environ.get("UDP_VIDEO_CODEC_QUALITY"):
        config_data.setdefault("codec", {})["quality"] = int(env_quality)
    if env_scale := os.environ.get("UDP_VIDEO_CODEC_SCALE"):
        config_data.setdefault("codec", {})["scale"] = float(env_scale)

    # Channel-wide overrides need the channel lists materialized first
    env_host = os.environ.get("UDP_VIDEO_DEST_HOST")
    if env_host:
        senders = config_data.get("senders")
        if senders is None:
            senders = [s.model_dump() for s in _default_senders()]
        for sender in senders:
            sender["host"] = env_host
        config_data["senders"] = senders

    env_timeout = os.environ.get("UDP_VIDEO_RECEIVE_TIMEOUT")
    if env_timeout:
        receivers = config_data.get("receivers")
        if receivers is None:
            receivers = [r.model_dump() for r in _default_receivers()]
        for receiver in receivers:
            receiver["timeout_seconds"] = float(env_timeout)
        config_data["receivers"] = receivers

    # Display settings
    if env_display := os.environ.get("UDP_VIDEO_DISPLAY_BACKEND"):
        config_data.setdefault("display", {})["backend"] = env_display

    # Server settings
    if env_enabled := os.environ.get("UDP_VIDEO_SERVER_ENABLED"):
        config_data.setdefault("server", {})["enabled"] = (
            env_enabled.lower() in ("1", "true", "yes", "on")
        )
    if env_port := os.environ.get("UDP_VIDEO_SERVER_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("UDP_VIDEO_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "thread": "%(threadName)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

