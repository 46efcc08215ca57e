"""
Stream Channel
==============

Lifecycle shared by sender and receiver channels.

State machine:
    UNBOUND --open() ok--> BOUND --run()--> RUNNING --stop()--> STOPPED
    UNBOUND --open() fails--> FAILED

A channel that fails to open never reaches RUNNING. Once running, no error
ends the loop: an exception inside one iteration is logged and counted, and
the next iteration starts after a short back-off. The loop only ends when
the stop event is set.
"""

import logging
import threading
import time
from enum import Enum
from typing import Optional

from udp_video_stream.channel.metrics import ChannelMetrics
from udp_video_stream.errors import TransportError


logger = logging.getLogger(__name__)


class ChannelState(str, Enum):
    """Lifecycle states of a StreamChannel."""

    UNBOUND = "UNBOUND"
    BOUND = "BOUND"
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    FAILED = "FAILED"


class StreamChannel:
    """
    One independent send or receive pipeline.

    Subclasses implement _open(), step() and _close().

    Attributes:
        name: Channel name, also used as the thread name
        role: "send" or "receive"
        metrics: Operational metrics
        error_backoff: Seconds to wait after a failed iteration
    """

    role: str = "channel"

    def __init__(
        self,
        name: str,
        stop_event: Optional[threading.Event] = None,
        error_backoff: float = 0.1,
    ) -> None:
        self.name = name
        self.error_backoff = error_backoff
        self.metrics = ChannelMetrics()

        self._stop_event = stop_event if stop_event is not None else threading.Event()
        self._state = ChannelState.UNBOUND

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def open(self) -> bool:
        """
        Acquire sockets and devices.

        Returns:
            True if the channel is BOUND, False if it FAILED
        """
        if self._state is not ChannelState.UNBOUND:
            return self._state is ChannelState.BOUND

        try:
            ok = self._open()
        except TransportError as e:
            logger.error(f"[{self.name}] {e}")
            ok = False

        if not ok:
            self._state = ChannelState.FAILED
            logger.error(f"[{self.name}] Channel setup failed, not starting")
            self._close()
            return False

        self._state = ChannelState.BOUND
        return True

    def run(self) -> None:
        """
        Open the channel and loop until stop() is called.

        Returns immediately if setup fails.
        """
        if not self.open():
            return

        self._state = ChannelState.RUNNING
        logger.info(f"[{self.name}] {self.role} loop started")

        try:
            while not self._stop_event.is_set():
                try:
                    self.step()
                except Exception as e:
                    if self._stop_event.is_set():
                        break
                    self.metrics.loop_errors += 1
                    logger.error(f"[{self.name}] Loop error: {e}")
                    self._stop_event.wait(self.error_backoff)
        finally:
            self.close()
            logger.info(f"[{self.name}] {self.role} loop stopped")

    def attach_stop_event(self, stop_event: threading.Event) -> None:
        """Share an external stop signal. Only allowed before run()."""
        if self._state is not ChannelState.UNBOUND:
            raise RuntimeError(f"Channel {self.name} already opened")
        self._stop_event = stop_event

    def stop(self) -> None:
        """Request the loop to exit after the current iteration."""
        self._stop_event.set()
        self._interrupt()

    def step(self) -> None:
        """Run exactly one loop iteration."""
        raise NotImplementedError

    def close(self) -> None:
        """Release sockets and devices. A FAILED channel stays FAILED."""
        self._close()
        if self._state is not ChannelState.FAILED:
            self._state = ChannelState.STOPPED

    def status(self) -> dict:
        """State and metrics snapshot."""
        return {
            "name": self.name,
            "role": self.role,
            "state": self._state.value,
            "metrics": self.metrics.to_dict(),
        }

    def _mark_activity(self) -> None:
        self.metrics.iterations += 1
        self.metrics.last_activity = time.time()

    def _open(self) -> bool:
        raise NotImplementedError

    def _close(self) -> None:
        pass

    def _interrupt(self) -> None:
        """Wake a loop blocked in I/O so it can observe the stop event."""
        pass
