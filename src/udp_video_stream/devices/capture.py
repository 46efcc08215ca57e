"""
Frame Sources
=============

Capture collaborators for sender channels.

This module provides the FrameSource protocol and two implementations:
    - CameraCapture: cv2.VideoCapture on a local device index
    - SyntheticCapture: deterministic moving test pattern, no hardware

Design Rules:
    - read_frame() never raises; an unavailable device yields an empty frame
    - Sources are owned by exactly one channel
"""

import logging
import time
from typing import Optional, Protocol

import cv2
import numpy as np

from udp_video_stream.frame import Frame, empty_frame


logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """
    Protocol for capture backends.

    Implementations return an empty frame whenever no image is available,
    so the send loop can treat "no camera" and "no frame yet" identically.
    """

    def open(self) -> bool:
        """Open the device. Returns False if it is unavailable."""
        ...

    def read_frame(self) -> Frame:
        """Return the next BGR frame, or an empty frame."""
        ...

    def close(self) -> None:
        """Release the device."""
        ...


class CameraCapture:
    """
    Camera frame source backed by cv2.VideoCapture.

    Attributes:
        index: Device index (0 = built-in camera, 1 = first USB camera, ...)
    """

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._capture: Optional[cv2.VideoCapture] = None
        self._warned_unavailable = False

    def open(self) -> bool:
        self._capture = cv2.VideoCapture(self.index)
        if not self._capture.isOpened():
            logger.error(f"Camera {self.index} is not available")
            return False
        logger.info(f"Opened camera {self.index}")
        return True

    def read_frame(self) -> Frame:
        if self._capture is None or not self._capture.isOpened():
            if not self._warned_unavailable:
                logger.warning(
                    f"Could not get frame. Camera {self.index} not available."
                )
                self._warned_unavailable = True
            return empty_frame()

        ok, image = self._capture.read()
        if not ok or image is None:
            logger.debug(f"Camera {self.index} returned no frame")
            return empty_frame()
        return image

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None


class SyntheticCapture:
    """
    Deterministic frame source for demos and tests.

    Produces a gradient background with a bar that moves one step per frame,
    so consecutive frames differ and compress like real video.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        fps: Simulated device rate; read_frame() blocks like a camera would.
            0 disables pacing.
        frames_produced: Number of frames returned so far
    """

    def __init__(self, width: int = 640, height: int = 480, fps: float = 30.0) -> None:
        self.width = width
        self.height = height
        self.fps = fps
        self.frames_produced = 0
        self._next_frame_time = 0.0

        # Static background, built once.
        ramp = np.linspace(0, 255, width, dtype=np.uint8)
        self._background = np.zeros((height, width, 3), dtype=np.uint8)
        self._background[:, :, 0] = ramp
        self._background[:, :, 1] = ramp[::-1]
        self._background[:, :, 2] = 96

    def open(self) -> bool:
        logger.info(f"SyntheticCapture opened: {self.width}x{self.height}")
        return True

    def read_frame(self) -> Frame:
        if self.fps > 0:
            now = time.monotonic()
            if now < self._next_frame_time:
                time.sleep(self._next_frame_time - now)
            self._next_frame_time = max(now, self._next_frame_time) + 1.0 / self.fps

        frame = self._background.copy()
        bar_width = max(1, self.width // 16)
        x = (self.frames_produced * 8) % self.width
        frame[:, x:x + bar_width] = 255
        self.frames_produced += 1
        return frame

    def close(self) -> None:
        pass


def create_frame_source(
    backend: str,
    camera_index: int = 0,
    width: int = 640,
    height: int = 480,
    fps: float = 30.0,
) -> FrameSource:
    """
    Create a frame source by backend name.

    Args:
        backend: "camera" or "synthetic"
        camera_index: Device index for the camera backend
        width: Frame width for the synthetic backend
        height: Frame height for the synthetic backend
        fps: Frame rate for the synthetic backend

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == "camera":
        return CameraCapture(index=camera_index)
    elif backend == "synthetic":
        return SyntheticCapture(width=width, height=height, fps=fps)
    else:
        raise ValueError(f"Unknown capture backend: {backend}")
