"""
Frame Sinks
===========

Display collaborators for receiver channels and sender previews.

Implementations:
    - OpenCVDisplay: one resizable HighGUI window per window name
    - HeadlessDisplay: keeps the last frame per window in memory (no GUI)

Display is fire-and-forget. Every show() ends with a short bounded wait
(``delay_ms``) that rate-limits redraws.
"""

import logging
import threading
import time
from typing import Dict, Optional, Protocol, Set

import cv2
import numpy as np

from udp_video_stream.frame import Frame, is_empty_frame


logger = logging.getLogger(__name__)


# Delay after each redraw, in milliseconds.
DEFAULT_DISPLAY_DELAY_MS = 15


class FrameSink(Protocol):
    """Protocol for display backends."""

    def show(self, window_name: str, image: Frame) -> None:
        """Display an image in the named window. Empty images are ignored."""
        ...

    def close(self) -> None:
        """Tear down any windows owned by this sink."""
        ...


class OpenCVDisplay:
    """
    HighGUI window display.

    Attributes:
        delay_ms: cv2.waitKey delay after each redraw
    """

    def __init__(self, delay_ms: int = DEFAULT_DISPLAY_DELAY_MS) -> None:
        self.delay_ms = delay_ms
        self._windows: Set[str] = set()

    def show(self, window_name: str, image: Frame) -> None:
        if is_empty_frame(image):
            return

        if window_name not in self._windows:
            cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
            self._windows.add(window_name)

        cv2.imshow(window_name, image)
        cv2.waitKey(self.delay_ms)

    def close(self) -> None:
        for window_name in self._windows:
            try:
                cv2.destroyWindow(window_name)
            except cv2.error as e:
                logger.debug(f"Could not destroy window {window_name!r}: {e}")
        self._windows.clear()


class HeadlessDisplay:
    """
    In-memory display for servers without a screen, and for tests.

    Thread-safe: several channels may share one instance.

    Attributes:
        delay_ms: Sleep after each show, mirroring the GUI redraw delay
        show_count: Total number of frames shown
    """

    def __init__(self, delay_ms: int = 0) -> None:
        self.delay_ms = delay_ms
        self.show_count = 0
        self.closed = False
        self._lock = threading.Lock()
        self._last: Dict[str, np.ndarray] = {}
        self._counts: Dict[str, int] = {}

    def show(self, window_name: str, image: Frame) -> None:
        if is_empty_frame(image):
            return

        with self._lock:
            self._last[window_name] = image.copy()
            self._counts[window_name] = self._counts.get(window_name, 0) + 1
            self.show_count += 1

        if self.delay_ms > 0:
            time.sleep(self.delay_ms / 1000.0)

    def last_frame(self, window_name: str) -> Optional[np.ndarray]:
        """Most recent image shown in a window, or None."""
        with self._lock:
            return self._last.get(window_name)

    def count(self, window_name: str) -> int:
        """Number of images shown in a window."""
        with self._lock:
            return self._counts.get(window_name, 0)

    def close(self) -> None:
        # Frames stay inspectable after the owning channel stops.
        self.closed = True


def create_frame_sink(backend: str, delay_ms: int = DEFAULT_DISPLAY_DELAY_MS) -> FrameSink:
    """
    Create a display by backend name.

    Args:
        backend: "opencv" or "headless"
        delay_ms: Redraw delay in milliseconds

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == "opencv":
        return OpenCVDisplay(delay_ms=delay_ms)
    elif backend == "headless":
        return HeadlessDisplay(delay_ms=delay_ms)
    else:
        raise ValueError(f"Unknown display backend: {backend}")


def load_placeholder(
    path: Optional[str] = None,
    width: int = 640,
    height: int = 480,
    label: str = "NO SIGNAL",
) -> np.ndarray:
    """
    Load the fallback image shown when a receiver has no recent frame.

    Falls back to a generated dark frame with a centred label when no path
    is given or the file cannot be read.

    Args:
        path: Image file to load
        width: Width of the generated placeholder
        height: Height of the generated placeholder
        label: Text drawn on the generated placeholder

    Returns:
        BGR placeholder image
    """
    if path:
        image = cv2.imread(path, cv2.IMREAD_COLOR)
        if image is not None:
            return image
        logger.warning(f"Placeholder image {path!r} unreadable, using generated one")

    image = np.full((height, width, 3), 32, dtype=np.uint8)
    font = cv2.FONT_HERSHEY_SIMPLEX
    (text_w, text_h), _ = cv2.getTextSize(label, font, 1.2, 2)
    origin = ((width - text_w) // 2, (height + text_h) // 2)
    cv2.putText(image, label, origin, font, 1.2, (200, 200, 200), 2)
    return image
