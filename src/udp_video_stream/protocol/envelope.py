"""
Protocol Envelope
=================

The pack/unpack contract between frames and datagram payloads.

Wire format (ProtocolKind.RAW_IMAGE):
    No header. The entire UDP payload is exactly one compressed image.
    A zero-length payload means "no frame was available".

New wire formats (fragmented frames, sequence-numbered frames) are added as
new ProtocolKind members handled by create_envelope; sockets and channels
only ever see pack() and unpack().
"""

import logging
from enum import Enum

from udp_video_stream.codec.frame_codec import FrameCodec
from udp_video_stream.frame import Frame, empty_frame


logger = logging.getLogger(__name__)


class ProtocolKind(str, Enum):
    """Supported wire formats."""

    RAW_IMAGE = "raw_image"


class ProtocolEnvelope:
    """
    Converts frames to wire messages and back.

    Attributes:
        kind: Wire format implemented by this envelope
        codec: Codec used for the image payload
    """

    def __init__(
        self,
        codec: FrameCodec,
        kind: ProtocolKind = ProtocolKind.RAW_IMAGE,
    ) -> None:
        self.codec = codec
        self.kind = kind

    def pack(self, frame: Frame, downscaled: bool = False) -> bytes:
        """
        Encode a frame into one wire message (b"" for an empty frame).

        Args:
            frame: BGR image, possibly empty
            downscaled: Frame already went through codec.downscale()
        """
        if downscaled:
            return self.codec.compress(frame)
        return self.codec.encode(frame)

    def unpack(self, message: bytes) -> Frame:
        """
        Decode one wire message into a frame.

        An empty message always yields an empty frame, never an error.
        """
        if not message:
            return empty_frame()
        return self.codec.decode(message)


def create_envelope(kind: ProtocolKind, codec: FrameCodec) -> ProtocolEnvelope:
    """
    Create the envelope for a wire format.

    Raises:
        ValueError: If kind is not a known ProtocolKind
    """
    kind = ProtocolKind(kind)

    if kind is ProtocolKind.RAW_IMAGE:
        return ProtocolEnvelope(codec=codec, kind=kind)

    raise ValueError(f"Unknown protocol kind: {kind}")
