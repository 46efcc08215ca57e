"""
Sender Channel
==============

Capture -> downscale -> overlay -> pack -> send, forever.

The loop runs at the capture device's natural rate; there is no pacing or
rate limiting beyond the time read_frame() blocks. When the camera is
unavailable every iteration produces an empty frame, which packs to an
empty datagram that is still sent. Receivers read that as "no frame".
"""

import logging
import threading
from typing import Optional

from udp_video_stream.channel.base import StreamChannel
from udp_video_stream.codec.overlay import SENDER_COLOR, SENDER_ORIGIN, draw_clock
from udp_video_stream.devices.capture import FrameSource
from udp_video_stream.devices.display import FrameSink
from udp_video_stream.frame import is_empty_frame
from udp_video_stream.protocol.envelope import ProtocolEnvelope
from udp_video_stream.transport.sockets import SenderSocket


logger = logging.getLogger(__name__)


class SenderChannel(StreamChannel):
    """
    Streams one capture device to one UDP destination.

    Attributes:
        host: Destination address
        port: Destination port
        envelope: Frame -> wire message conversion
        capture: Frame source owned by this channel
        display: Sink for the local preview (used when show_preview is set)
        preview_window: Window name of the local preview
        overlay_clock: Stamp local time on each frame before sending
        clock_offset_ms: Milliseconds added to the stamped time
        empty_frame_interval: Wait after sending an empty datagram

    Example:
        channel = SenderChannel(
            name="camera-0",
            host="192.168.43.168",
            port=6000,
            envelope=ProtocolEnvelope(FrameCodec(quality=60, scale=0.6)),
            capture=CameraCapture(0),
        )
        threading.Thread(target=channel.run, daemon=True).start()
    """

    role = "send"

    def __init__(
        self,
        name: str,
        host: str,
        port: int,
        envelope: ProtocolEnvelope,
        capture: FrameSource,
        display: Optional[FrameSink] = None,
        show_preview: bool = False,
        preview_window: Optional[str] = None,
        overlay_clock: bool = True,
        clock_offset_ms: int = 0,
        empty_frame_interval: float = 0.05,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        super().__init__(name=name, stop_event=stop_event)
        self.host = host
        self.port = port
        self.envelope = envelope
        self.capture = capture
        self.display = display
        self.show_preview = show_preview and display is not None
        self.preview_window = preview_window or f"{name} (preview)"
        self.overlay_clock = overlay_clock
        self.clock_offset_ms = clock_offset_ms
        self.empty_frame_interval = empty_frame_interval

        self._socket: Optional[SenderSocket] = None

    def _open(self) -> bool:
        self._socket = SenderSocket(self.host, self.port)

        if not self.capture.open():
            logger.warning(
                f"[{self.name}] Capture unavailable, sending empty frames"
            )

        logger.info(f"[{self.name}] Sending to {self.host} on port {self.port}.")
        return True

    def step(self) -> None:
        # Overlay and preview operate on the transmitted size.
        frame = self.envelope.codec.downscale(self.capture.read_frame())
        empty = is_empty_frame(frame)

        if not empty:
            if self.overlay_clock:
                draw_clock(
                    frame,
                    origin=SENDER_ORIGIN,
                    color=SENDER_COLOR,
                    offset_ms=self.clock_offset_ms,
                )
            if self.show_preview:
                self.display.show(self.preview_window, frame)

        message = self.envelope.pack(frame, downscaled=True)
        sent = self._socket.send(message)

        if message and sent == 0:
            self.metrics.send_errors += 1
        elif message:
            self.metrics.frames_sent += 1
            self.metrics.bytes_sent += sent
        else:
            self.metrics.empty_messages += 1
        self._mark_activity()

        if not message and self.empty_frame_interval > 0:
            self._stop_event.wait(self.empty_frame_interval)

    def _close(self) -> None:
        if self._socket is not None:
            self._socket.close()
        self.capture.close()
        if self.show_preview:
            self.display.close()
