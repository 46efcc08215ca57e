"""
Frame Codec
===========

Downscale and compress frames into bytes, and decode bytes back into frames.

This is the ONLY place in the codebase that calls ``cv2.imencode`` or
``cv2.imdecode``.

Design Rules:
    - Never raises on frame data: empty or unencodable input -> b""
    - Empty, truncated or corrupt bytes decode to an empty frame
    - Parameters are validated once, at construction
"""

import logging
from typing import List

import cv2
import numpy as np

from udp_video_stream.errors import CodecError
from udp_video_stream.frame import Frame, empty_frame, is_empty_frame


logger = logging.getLogger(__name__)


# Quality flag per supported container.
_QUALITY_FLAGS = {
    ".jpg": cv2.IMWRITE_JPEG_QUALITY,
    ".jpeg": cv2.IMWRITE_JPEG_QUALITY,
    ".webp": cv2.IMWRITE_WEBP_QUALITY,
}

SUPPORTED_EXTENSIONS = tuple(_QUALITY_FLAGS)


class FrameCodec:
    """
    Lossy still-image codec for single frames.

    Attributes:
        extension: Image container, e.g. ".jpg"
        quality: Compression quality, 1-100
        scale: Downscale factor in (0, 1]; 1.0 disables resizing

    Example:
        codec = FrameCodec(quality=60, scale=0.6)
        data = codec.encode(frame)      # 640x480 -> 384x288 JPEG bytes
        image = codec.decode(data)
    """

    def __init__(
        self,
        quality: int = 60,
        scale: float = 1.0,
        extension: str = ".jpg",
    ) -> None:
        """
        Initialize codec.

        Args:
            quality: Compression quality, 1-100
            scale: Downscale factor in (0, 1]
            extension: One of SUPPORTED_EXTENSIONS

        Raises:
            CodecError: If any parameter is out of range
        """
        extension = extension.lower()
        if extension not in _QUALITY_FLAGS:
            raise CodecError(
                f"Unsupported image format {extension!r}, "
                f"expected one of {SUPPORTED_EXTENSIONS}"
            )
        if not 1 <= quality <= 100:
            raise CodecError(f"quality must be in [1, 100], got {quality}")
        if not 0.0 < scale <= 1.0:
            raise CodecError(f"scale must be in (0, 1], got {scale}")

        self.extension = extension
        self.quality = quality
        self.scale = scale
        self._params: List[int] = [int(_QUALITY_FLAGS[extension]), int(quality)]

    def __repr__(self) -> str:
        return (
            f"FrameCodec(extension={self.extension!r}, "
            f"quality={self.quality}, scale={self.scale})"
        )

    def downscale(self, frame: Frame) -> Frame:
        """
        Resize a frame by the configured scale.

        Frames are returned unchanged when scale is 1.0 or the frame is empty.
        """
        if is_empty_frame(frame) or self.scale >= 1.0:
            return frame
        return cv2.resize(
            frame,
            (0, 0),
            fx=self.scale,
            fy=self.scale,
            interpolation=cv2.INTER_AREA,
        )

    def encode(self, frame: Frame) -> bytes:
        """
        Downscale and compress a frame.

        Args:
            frame: BGR image, possibly empty

        Returns:
            Compressed bytes, or b"" for an empty or unencodable frame
        """
        return self.compress(self.downscale(frame))

    def compress(self, frame: Frame) -> bytes:
        """
        Compress a frame as-is, without resizing.

        Used when the caller has already downscaled the frame, e.g. to draw
        an overlay at its transmitted size.
        """
        if is_empty_frame(frame):
            return b""

        try:
            ok, buffer = cv2.imencode(self.extension, frame, self._params)
        except cv2.error as e:
            logger.debug(f"Frame encode failed: {e}")
            return b""

        if not ok:
            logger.debug("Frame encode failed: cv2.imencode returned False")
            return b""

        return buffer.tobytes()

    def decode(self, data: bytes) -> Frame:
        """
        Decompress bytes into a BGR frame.

        Args:
            data: Compressed image bytes, possibly empty

        Returns:
            Decoded BGR image, or an empty frame if data is empty or corrupt
        """
        if not data:
            return empty_frame()

        try:
            image = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
        except cv2.error as e:
            logger.debug(f"Frame decode failed ({len(data)} bytes): {e}")
            return empty_frame()

        if image is None:
            logger.debug(
                f"Frame decode failed ({len(data)} bytes): "
                f"cv2.imdecode returned None"
            )
            return empty_frame()

        return image
