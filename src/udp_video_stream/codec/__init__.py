"""
Codec Module
============

Frame compression and on-frame annotation.

Components:
    - FrameCodec: Downscale + JPEG/WebP encode, tolerant decode
    - draw_clock: Wall-clock text overlay
"""

from udp_video_stream.codec.frame_codec import FrameCodec, SUPPORTED_EXTENSIONS
from udp_video_stream.codec.overlay import (
    RECEIVER_COLOR,
    RECEIVER_ORIGIN,
    SENDER_COLOR,
    SENDER_ORIGIN,
    draw_clock,
    format_clock,
)


__all__ = [
    "FrameCodec",
    "SUPPORTED_EXTENSIONS",
    "draw_clock",
    "format_clock",
    "SENDER_COLOR",
    "SENDER_ORIGIN",
    "RECEIVER_COLOR",
    "RECEIVER_ORIGIN",
]
