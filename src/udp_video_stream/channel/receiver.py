"""
Receiver Channel
================

Receive -> unpack -> display, forever.

Two receive policies:
    - BLOCKING: wait for each datagram with no timeout and display exactly
      the frames that arrive. Empty payloads display nothing, so the window
      keeps the last real frame.
    - TIMEOUT_FALLBACK: wait at most ``timeout`` seconds. A timeout, an empty
      payload and an undecodable payload all mean "no frame", and the
      placeholder image is displayed instead, so a viewer can tell a silent
      sender from a live one.

Frames are displayed in arrival order; there is no reordering and no
staleness check.
"""

import logging
import threading
from typing import Optional, Tuple

import numpy as np

from udp_video_stream.channel.base import StreamChannel
from udp_video_stream.codec.overlay import RECEIVER_COLOR, RECEIVER_ORIGIN, draw_clock
from udp_video_stream.devices.display import FrameSink, load_placeholder
from udp_video_stream.frame import is_empty_frame
from udp_video_stream.protocol.envelope import ProtocolEnvelope
from udp_video_stream.transport.sockets import ReceivePolicy, ReceiverSocket


logger = logging.getLogger(__name__)


class ReceiverChannel(StreamChannel):
    """
    Displays the frames arriving on one UDP port.

    Attributes:
        port: Listen port (0 = ephemeral, resolved on open)
        host: Local bind address
        envelope: Wire message -> frame conversion
        display: Frame sink
        window_name: Window this channel draws into
        policy: ReceivePolicy
        timeout: Receive timeout in seconds (TIMEOUT_FALLBACK only)
        placeholder: Image shown when no frame is available
        overlay_clock: Stamp local receive time on displayed frames
        last_frame_shape: Shape of the most recently displayed real frame
    """

    role = "receive"

    def __init__(
        self,
        name: str,
        port: int,
        envelope: ProtocolEnvelope,
        display: FrameSink,
        window_name: Optional[str] = None,
        host: str = "0.0.0.0",
        policy: ReceivePolicy = ReceivePolicy.TIMEOUT_FALLBACK,
        timeout: float = 1.0,
        placeholder: Optional[np.ndarray] = None,
        overlay_clock: bool = True,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        super().__init__(name=name, stop_event=stop_event)
        self.port = port
        self.host = host
        self.envelope = envelope
        self.display = display
        self.window_name = window_name or name
        self.policy = ReceivePolicy(policy)
        self.timeout = timeout
        self.placeholder = placeholder if placeholder is not None else load_placeholder()
        self.overlay_clock = overlay_clock
        self.last_frame_shape: Optional[Tuple[int, ...]] = None

        self._socket: Optional[ReceiverSocket] = None

    def _open(self) -> bool:
        self._socket = ReceiverSocket(self.port, host=self.host)
        if not self._socket.bind():
            return False
        self.port = self._socket.port
        return True

    def step(self) -> None:
        timeout = self.timeout if self.policy is ReceivePolicy.TIMEOUT_FALLBACK else None
        message = self._socket.receive_next(timeout)

        if self._stop_event.is_set():
            return

        frame = self.envelope.unpack(message)
        self._mark_activity()

        if not is_empty_frame(frame):
            self.metrics.frames_received += 1
            self.metrics.bytes_received += len(message)
            self.last_frame_shape = frame.shape
            if self.overlay_clock:
                draw_clock(frame, origin=RECEIVER_ORIGIN, color=RECEIVER_COLOR)
            self.display.show(self.window_name, frame)
            return

        if message:
            self.metrics.decode_failures += 1
            logger.debug(
                f"[{self.name}] Dropped undecodable payload ({len(message)} bytes)"
            )
        else:
            self.metrics.empty_messages += 1

        if self.policy is ReceivePolicy.TIMEOUT_FALLBACK:
            self.metrics.placeholders_shown += 1
            self.display.show(self.window_name, self.placeholder)

    def _interrupt(self) -> None:
        # A BLOCKING receive only returns when the socket is closed.
        if self.policy is ReceivePolicy.BLOCKING and self._socket is not None:
            self._socket.close()

    def _close(self) -> None:
        if self._socket is not None:
            self._socket.close()
        self.display.close()
