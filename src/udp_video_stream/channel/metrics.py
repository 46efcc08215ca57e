"""
Channel Metrics
===============

Per-channel counters for health monitoring.

Counters are written only by the channel's own thread and read by others
(status endpoint, orchestrator), so no locking is used.
"""


class ChannelMetrics:
    """Metrics for StreamChannel observability."""

    __slots__ = (
        "frames_sent",
        "frames_received",
        "empty_messages",
        "bytes_sent",
        "bytes_received",
        "decode_failures",
        "send_errors",
        "placeholders_shown",
        "loop_errors",
        "iterations",
        "last_activity",
    )

    def __init__(self) -> None:
        self.frames_sent: int = 0
        self.frames_received: int = 0
        self.empty_messages: int = 0
        self.bytes_sent: int = 0
        self.bytes_received: int = 0
        self.decode_failures: int = 0
        self.send_errors: int = 0
        self.placeholders_shown: int = 0
        self.loop_errors: int = 0
        self.iterations: int = 0
        self.last_activity: float = 0.0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {name: getattr(self, name) for name in self.__slots__}
