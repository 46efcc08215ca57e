"""
Frame Data Model
=================

In-memory frame representation shared by every stage of the pipeline.

A frame is an OpenCV BGR image (``np.ndarray`` of shape (H, W, 3), uint8).
An *empty* frame means "no frame available this cycle" and is either
``None`` or an array with zero elements. Use ``is_empty_frame`` rather than
testing truthiness, which is ambiguous for numpy arrays.

Design Rules:
    - Empty frames are values, not errors
    - Frames are owned by one stage at a time; copy before sharing
"""

from typing import Optional, Tuple

import numpy as np


Frame = Optional[np.ndarray]

# Largest datagram the receive buffer accepts.
MAX_DATAGRAM_SIZE = 65535

# Largest UDP payload that fits in one IPv4 datagram (65535 - 20 IP - 8 UDP).
MAX_IPV4_PAYLOAD = 65507


def empty_frame() -> np.ndarray:
    """Return a new zero-sized BGR frame."""
    return np.empty((0, 0, 3), dtype=np.uint8)


def is_empty_frame(frame: Frame) -> bool:
    """True for ``None`` and for arrays with no pixels."""
    return frame is None or frame.size == 0


def frame_dimensions(frame: Frame) -> Optional[Tuple[int, int]]:
    """
    Get (width, height) of a frame.

    Args:
        frame: Frame to measure

    Returns:
        Tuple of (width, height), or None for an empty frame
    """
    if is_empty_frame(frame):
        return None
    height, width = frame.shape[:2]
    return width, height
