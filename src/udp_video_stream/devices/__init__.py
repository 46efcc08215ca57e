"""
Devices Module
==============

Capture and display collaborators.

The streaming core treats these as black boxes: a FrameSource hands out
frames (or empty frames), a FrameSink shows them. Backends are selected by
name from configuration:

    - capture: "camera" (cv2.VideoCapture) or "synthetic" (test pattern)
    - display: "opencv" (HighGUI windows) or "headless" (in memory)
"""

from udp_video_stream.devices.capture import (
    CameraCapture,
    FrameSource,
    SyntheticCapture,
    create_frame_source,
)
from udp_video_stream.devices.display import (
    DEFAULT_DISPLAY_DELAY_MS,
    FrameSink,
    HeadlessDisplay,
    OpenCVDisplay,
    create_frame_sink,
    load_placeholder,
)


__all__ = [
    "CameraCapture",
    "FrameSource",
    "SyntheticCapture",
    "create_frame_source",
    "DEFAULT_DISPLAY_DELAY_MS",
    "FrameSink",
    "HeadlessDisplay",
    "OpenCVDisplay",
    "create_frame_sink",
    "load_placeholder",
]
