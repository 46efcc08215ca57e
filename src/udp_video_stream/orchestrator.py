"""
Stream Orchestrator
===================

Runs a fixed set of independent channels concurrently.

Each channel gets its own daemon thread and its own socket, codec, capture
and display objects; the only thing channels share is the stop event. A
channel that fails to start (for example, its port is already in use) is
marked FAILED and has no effect on the others.

Example:
    from udp_video_stream.config import load_config

    settings = load_config("config.yaml")

    orchestrator = StreamOrchestrator(build_channels(settings, role="receive"))
    orchestrator.start()
    try:
        orchestrator.wait()
    finally:
        orchestrator.stop()
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence

from udp_video_stream.channel import (
    ChannelState,
    ReceiverChannel,
    SenderChannel,
    StreamChannel,
)
from udp_video_stream.codec.frame_codec import FrameCodec
from udp_video_stream.config import Settings
from udp_video_stream.devices.capture import create_frame_source
from udp_video_stream.devices.display import create_frame_sink, load_placeholder
from udp_video_stream.protocol.envelope import create_envelope


logger = logging.getLogger(__name__)


ROLES = ("send", "receive", "all")


class StreamOrchestrator:
    """
    Fan-out runner for StreamChannels.

    Attributes:
        channels: Channels managed by this orchestrator
        stop_event: Shared stop signal, checked by every channel loop
    """

    def __init__(
        self,
        channels: Sequence[StreamChannel],
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        names = [channel.name for channel in channels]
        if len(names) != len(set(names)):
            raise ValueError(f"Channel names must be unique: {names}")

        self.channels: List[StreamChannel] = list(channels)
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._threads: Dict[str, threading.Thread] = {}

        # Channels built elsewhere must observe this orchestrator's stop signal.
        for channel in self.channels:
            channel.attach_stop_event(self.stop_event)

    @property
    def started(self) -> bool:
        return bool(self._threads)

    def start(self) -> None:
        """Start one daemon thread per channel. Returns immediately."""
        if self._threads:
            raise RuntimeError("Orchestrator already started")

        logger.info(f"Starting {len(self.channels)} channel(s)")
        for channel in self.channels:
            thread = threading.Thread(
                target=channel.run,
                name=channel.name,
                daemon=True,
            )
            self._threads[channel.name] = thread
            thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """
        Signal all channels to stop and wait for their threads.

        Args:
            timeout: Seconds to wait for each thread
        """
        logger.info("Stopping channels...")
        self.stop_event.set()
        for channel in self.channels:
            channel.stop()

        for name, thread in self._threads.items():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"Channel {name} did not stop within {timeout:.1f}s")

        logger.info("All channels stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until stop is requested.

        Returns:
            True if stop was requested, False on timeout
        """
        return self.stop_event.wait(timeout)

    def running_channels(self) -> List[StreamChannel]:
        return [c for c in self.channels if c.state is ChannelState.RUNNING]

    def failed_channels(self) -> List[StreamChannel]:
        return [c for c in self.channels if c.state is ChannelState.FAILED]

    def status(self) -> List[dict]:
        """Per-channel state and metrics."""
        return [channel.status() for channel in self.channels]


# =============================================================================
# Channel Factory
# =============================================================================

def build_channels(
    settings: Settings,
    role: str = "all",
    stop_event: Optional[threading.Event] = None,
) -> List[StreamChannel]:
    """
    Construct channels from configuration.

    Every channel gets its own codec, envelope, capture and display.

    Args:
        settings: Loaded settings
        role: "send", "receive" or "all"
        stop_event: Stop signal shared by the channels

    Returns:
        Channels in configuration order, senders first
    """
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}, expected one of {ROLES}")

    channels: List[StreamChannel] = []
    codec_cfg = settings.codec
    display_cfg = settings.display

    if role in ("send", "all"):
        for cfg in settings.senders:
            codec = FrameCodec(
                quality=cfg.quality if cfg.quality is not None else codec_cfg.quality,
                scale=cfg.scale if cfg.scale is not None else codec_cfg.scale,
                extension=codec_cfg.extension,
            )
            channels.append(
                SenderChannel(
                    name=cfg.name,
                    host=cfg.host,
                    port=cfg.port,
                    envelope=create_envelope(codec_cfg.protocol, codec),
                    capture=create_frame_source(
                        cfg.capture_backend,
                        camera_index=cfg.camera_index,
                        width=cfg.synthetic_width,
                        height=cfg.synthetic_height,
                        fps=cfg.synthetic_fps,
                    ),
                    display=(
                        create_frame_sink(display_cfg.backend, display_cfg.delay_ms)
                        if cfg.show_preview else None
                    ),
                    show_preview=cfg.show_preview,
                    overlay_clock=cfg.overlay_clock,
                    clock_offset_ms=cfg.clock_offset_ms,
                    stop_event=stop_event,
                )
            )

    if role in ("receive", "all"):
        for cfg in settings.receivers:
            # Receivers only decode; quality and scale do not apply.
            codec = FrameCodec(extension=codec_cfg.extension)
            channels.append(
                ReceiverChannel(
                    name=cfg.name,
                    port=cfg.port,
                    host=cfg.host,
                    envelope=create_envelope(codec_cfg.protocol, codec),
                    display=create_frame_sink(display_cfg.backend, display_cfg.delay_ms),
                    window_name=cfg.window_name,
                    policy=cfg.policy,
                    timeout=cfg.timeout_seconds,
                    placeholder=load_placeholder(
                        cfg.placeholder_path,
                        width=display_cfg.placeholder_width,
                        height=display_cfg.placeholder_height,
                    ),
                    overlay_clock=cfg.overlay_clock,
                    stop_event=stop_event,
                )
            )

    return channels
