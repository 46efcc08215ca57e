"""
Clock Overlay
=============

Stamp wall-clock text onto frames.

Senders stamp the capture time and receivers stamp the display time, so a
viewer can read end-to-end latency off the screen. When the two machines'
clocks disagree, ``clock_offset_ms`` shifts the sender's stamp explicitly.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

import cv2

from udp_video_stream.frame import Frame, is_empty_frame


# BGR colours
SENDER_COLOR = (0, 255, 0)
RECEIVER_COLOR = (0, 0, 255)

SENDER_ORIGIN = (16, 100)
RECEIVER_ORIGIN = (16, 40)


def format_clock(now: Optional[datetime] = None, offset_ms: int = 0) -> str:
    """Format local time as HH:MM:SS.mmm, shifted by offset_ms."""
    if now is None:
        now = datetime.now()
    now = now + timedelta(milliseconds=offset_ms)
    return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def draw_clock(
    frame: Frame,
    origin: Tuple[int, int] = SENDER_ORIGIN,
    color: Tuple[int, int, int] = SENDER_COLOR,
    offset_ms: int = 0,
    now: Optional[datetime] = None,
) -> Frame:
    """
    Draw the current time onto a frame in place.

    Args:
        frame: BGR image to draw on; empty frames are returned untouched
        origin: Bottom-left corner of the text in pixels
        color: BGR text colour
        offset_ms: Milliseconds added to the local clock
        now: Time to render (defaults to now)

    Returns:
        The same frame object
    """
    if is_empty_frame(frame):
        return frame

    cv2.putText(
        frame,
        format_clock(now, offset_ms),
        origin,
        cv2.FONT_HERSHEY_COMPLEX_SMALL,
        1.6,
        color,
        2,
    )
    return frame
