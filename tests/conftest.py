"""
Test Configuration
==================

Pytest fixtures and test configuration for udp-video-stream.

All network tests run over 127.0.0.1 on ephemeral ports.
"""

import socket
import time
from typing import Callable

import numpy as np
import pytest

from udp_video_stream.codec import FrameCodec
from udp_video_stream.devices import HeadlessDisplay, SyntheticCapture
from udp_video_stream.frame import empty_frame
from udp_video_stream.protocol import ProtocolEnvelope
from udp_video_stream.transport import ReceiverSocket


class UnavailableCapture:
    """Frame source whose device never opens."""

    def __init__(self) -> None:
        self.reads = 0

    def open(self) -> bool:
        return False

    def read_frame(self):
        self.reads += 1
        return empty_frame()

    def close(self) -> None:
        pass


class FlakyCapture(SyntheticCapture):
    """SyntheticCapture that raises on its first read."""

    def __init__(self) -> None:
        super().__init__(width=160, height=120, fps=0)
        self.raised = False

    def read_frame(self):
        if not self.raised:
            self.raised = True
            raise RuntimeError("device hiccup")
        return super().read_frame()


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def sample_frame():
    """Provide a 640x480 BGR test frame."""
    return SyntheticCapture(width=640, height=480, fps=0).read_frame()


@pytest.fixture
def codec():
    """Provide the default sender codec (quality 60, scale 0.6)."""
    return FrameCodec(quality=60, scale=0.6)


@pytest.fixture
def envelope(codec):
    """Provide a raw-image envelope over the default codec."""
    return ProtocolEnvelope(codec)


@pytest.fixture
def display():
    """Provide an in-memory display."""
    return HeadlessDisplay()


@pytest.fixture
def placeholder():
    """Provide a recognizable placeholder image."""
    return np.full((48, 64, 3), 7, dtype=np.uint8)


@pytest.fixture
def bound_receiver():
    """Provide a ReceiverSocket bound to an ephemeral loopback port."""
    receiver = ReceiverSocket(0, host="127.0.0.1")
    assert receiver.bind()
    yield receiver
    receiver.close()


@pytest.fixture
def free_udp_port():
    """Provide a loopback UDP port that was free a moment ago."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port
