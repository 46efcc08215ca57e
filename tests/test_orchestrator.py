"""
Orchestrator Tests
==================

Concurrent channels, channel independence and the config-driven factory.
"""

import pytest

from conftest import wait_until
from udp_video_stream.channel import ChannelState, ReceiverChannel, SenderChannel
from udp_video_stream.codec import FrameCodec
from udp_video_stream.config import Settings
from udp_video_stream.devices import HeadlessDisplay, SyntheticCapture
from udp_video_stream.orchestrator import StreamOrchestrator, build_channels
from udp_video_stream.protocol import ProtocolEnvelope
from udp_video_stream.transport import ReceivePolicy


def make_receiver(name, port, display, timeout=0.05):
    return ReceiverChannel(
        name=name,
        port=port,
        host="127.0.0.1",
        envelope=ProtocolEnvelope(FrameCodec()),
        display=display,
        timeout=timeout,
    )


class TestStreamOrchestrator:
    """Tests for StreamOrchestrator."""

    def test_sender_to_receiver_over_loopback(self, free_udp_port):
        display = HeadlessDisplay()
        receiver = make_receiver("rx", free_udp_port, display, timeout=0.5)
        sender = SenderChannel(
            name="tx",
            host="127.0.0.1",
            port=free_udp_port,
            envelope=ProtocolEnvelope(FrameCodec(quality=60, scale=0.6)),
            capture=SyntheticCapture(width=640, height=480, fps=50),
        )
        orchestrator = StreamOrchestrator([receiver, sender])

        orchestrator.start()
        try:
            assert wait_until(lambda: receiver.metrics.frames_received >= 3)
        finally:
            orchestrator.stop()

        assert display.last_frame("rx").shape == (288, 384, 3)
        assert sender.state is ChannelState.STOPPED
        assert receiver.state is ChannelState.STOPPED
        assert orchestrator.running_channels() == []

    def test_failed_channel_does_not_affect_others(self, bound_receiver):
        blocked = make_receiver("blocked", bound_receiver.port, HeadlessDisplay())
        healthy_display = HeadlessDisplay()
        healthy = make_receiver("healthy", 0, healthy_display)
        orchestrator = StreamOrchestrator([blocked, healthy])

        orchestrator.start()
        try:
            assert wait_until(lambda: healthy_display.count("healthy") >= 2)
            assert [c.name for c in orchestrator.failed_channels()] == ["blocked"]
            assert [c.name for c in orchestrator.running_channels()] == ["healthy"]
        finally:
            orchestrator.stop()

        assert blocked.state is ChannelState.FAILED
        assert healthy.state is ChannelState.STOPPED

    def test_stop_reaches_blocking_receivers(self):
        display = HeadlessDisplay()
        channels = [
            ReceiverChannel(
                name=f"rx-{i}",
                port=0,
                host="127.0.0.1",
                envelope=ProtocolEnvelope(FrameCodec()),
                display=display,
                policy=ReceivePolicy.BLOCKING,
            )
            for i in range(3)
        ]
        orchestrator = StreamOrchestrator(channels)

        orchestrator.start()
        assert wait_until(lambda: len(orchestrator.running_channels()) == 3)
        orchestrator.stop(timeout=2.0)

        assert all(c.state is ChannelState.STOPPED for c in channels)

    def test_rejects_duplicate_names(self):
        display = HeadlessDisplay()
        with pytest.raises(ValueError):
            StreamOrchestrator(
                [make_receiver("same", 0, display), make_receiver("same", 0, display)]
            )

    def test_start_twice_rejected(self):
        orchestrator = StreamOrchestrator([make_receiver("rx", 0, HeadlessDisplay())])
        orchestrator.start()
        try:
            with pytest.raises(RuntimeError):
                orchestrator.start()
        finally:
            orchestrator.stop()

    def test_status_lists_every_channel(self):
        display = HeadlessDisplay()
        orchestrator = StreamOrchestrator(
            [make_receiver("a", 0, display), make_receiver("b", 0, display)]
        )
        assert [s["name"] for s in orchestrator.status()] == ["a", "b"]
        assert orchestrator.started is False


class TestBuildChannels:
    """Tests for build_channels."""

    @pytest.fixture
    def settings(self):
        return Settings.model_validate(
            {
                "codec": {"quality": 60, "scale": 0.6},
                "senders": [
                    {"name": "cam-a", "port": 6000, "capture_backend": "synthetic"},
                    {
                        "name": "cam-b",
                        "port": 5000,
                        "capture_backend": "synthetic",
                        "scale": 0.25,
                        "quality": 90,
                        "show_preview": True,
                    },
                ],
                "receivers": [
                    {"name": "rx-a", "port": 4000, "window_name": "Streaming Video 0"},
                    {"name": "rx-b", "port": 4001, "policy": "blocking"},
                ],
                "display": {"backend": "headless"},
            }
        )

    def test_all_roles(self, settings):
        channels = build_channels(settings)
        assert [c.name for c in channels] == ["cam-a", "cam-b", "rx-a", "rx-b"]

    def test_send_only(self, settings):
        channels = build_channels(settings, role="send")
        assert all(isinstance(c, SenderChannel) for c in channels)
        assert len(channels) == 2

    def test_receive_only(self, settings):
        channels = build_channels(settings, role="receive")
        assert all(isinstance(c, ReceiverChannel) for c in channels)
        assert channels[0].window_name == "Streaming Video 0"
        assert channels[1].window_name == "rx-b"
        assert channels[1].policy is ReceivePolicy.BLOCKING

    def test_sender_codec_overrides(self, settings):
        cam_a, cam_b = build_channels(settings, role="send")

        assert (cam_a.envelope.codec.quality, cam_a.envelope.codec.scale) == (60, 0.6)
        assert (cam_b.envelope.codec.quality, cam_b.envelope.codec.scale) == (90, 0.25)
        assert cam_a.display is None
        assert cam_b.show_preview is True

    def test_channels_do_not_share_state(self, settings):
        rx_a, rx_b = build_channels(settings, role="receive")
        assert rx_a.display is not rx_b.display
        assert rx_a.envelope is not rx_b.envelope

    def test_unknown_role(self, settings):
        with pytest.raises(ValueError):
            build_channels(settings, role="relay")
