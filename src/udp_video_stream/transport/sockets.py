"""
UDP Transport
=============

Sender and receiver sockets, one UDP endpoint each.

SenderSocket fires one best-effort datagram per call to a fixed destination.
ReceiverSocket binds a local port and waits, with or without a timeout, for
the next inbound datagram.

Design Rules:
    - No retries, no acknowledgments, no fragmentation
    - Bind failure is reported once and is fatal for the owning channel
    - A receive timeout returns NO_DATA (b"") instead of raising
"""

import logging
import socket
from enum import Enum
from typing import Optional, Tuple

from udp_video_stream.errors import TransportError
from udp_video_stream.frame import MAX_DATAGRAM_SIZE


logger = logging.getLogger(__name__)


# Returned by ReceiverSocket.receive_next when the timeout expires.
NO_DATA = b""


class ReceivePolicy(str, Enum):
    """How a receiver waits for the next datagram."""

    # Wait forever; show exactly the frames that arrive.
    BLOCKING = "blocking"
    # Poll with a short timeout; show a placeholder when nothing arrives.
    TIMEOUT_FALLBACK = "timeout_fallback"


def _create_udp_socket() -> socket.socket:
    try:
        return socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as e:
        raise TransportError(f"Could not create UDP socket: {e}") from e


class SenderSocket:
    """
    UDP socket bound to an ephemeral port, sending to one destination.

    Attributes:
        destination: (host, port) every datagram is sent to
        send_errors: Number of sends rejected by the OS

    Example:
        with SenderSocket("192.168.1.3", 4000) as sock:
            sock.send(payload)
    """

    def __init__(self, host: str, port: int) -> None:
        """
        Create the socket.

        Args:
            host: Destination address
            port: Destination port

        Raises:
            TransportError: If the socket cannot be created
        """
        self.destination: Tuple[str, int] = (host, port)
        self.send_errors: int = 0
        self._sock: Optional[socket.socket] = _create_udp_socket()

    def send(self, data: bytes) -> int:
        """
        Send one datagram.

        Payloads larger than the network allows are rejected by the OS; the
        rejection is logged and counted, never raised.

        Args:
            data: Complete datagram payload (may be empty)

        Returns:
            Number of bytes written, 0 if the OS rejected the datagram
        """
        if self._sock is None:
            raise TransportError("Cannot send on a closed socket")

        try:
            return self._sock.sendto(data, self.destination)
        except OSError as e:
            self.send_errors += 1
            logger.warning(
                f"Send of {len(data)} bytes to "
                f"{self.destination[0]}:{self.destination[1]} failed: {e}"
            )
            return 0

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    @property
    def closed(self) -> bool:
        return self._sock is None

    def __enter__(self) -> "SenderSocket":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class ReceiverSocket:
    """
    UDP socket listening on a local port.

    Attributes:
        port: Port to listen on (0 = pick an ephemeral port on bind)
        host: Local address to bind, "0.0.0.0" for all interfaces
        bound: Whether bind() succeeded

    Example:
        sock = ReceiverSocket(4000)
        if not sock.bind():
            raise SystemExit(1)
        message = sock.receive_next(timeout=1.0)
    """

    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        """
        Create the socket (not yet bound).

        Raises:
            TransportError: If the socket cannot be created
        """
        self.port = port
        self.host = host
        self.bound: bool = False
        self._sock: Optional[socket.socket] = _create_udp_socket()

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); port reflects the OS choice when port was 0."""
        if self._sock is not None and self.bound:
            return self._sock.getsockname()[:2]
        return (self.host, self.port)

    def bind(self) -> bool:
        """
        Bind the socket to its listen port.

        Returns:
            True on success, False if the socket is closed or the bind failed
        """
        if self._sock is None:
            logger.error("Binding failed. Socket was not initialized.")
            return False

        try:
            self._sock.bind((self.host, self.port))
        except OSError as e:
            logger.error(
                f"Binding failed. Could not bind {self.host}:{self.port}: {e}"
            )
            return False

        self.bound = True
        self.port = self._sock.getsockname()[1]
        logger.info(f"Listening on port {self.port}")
        return True

    def receive_next(self, timeout: Optional[float] = None) -> bytes:
        """
        Wait for the next datagram.

        Args:
            timeout: Seconds to wait. None = wait forever.

        Returns:
            The datagram payload (possibly b""), or NO_DATA on timeout

        Raises:
            TransportError: If the socket is not bound or has been closed
        """
        sock = self._sock
        if sock is None or not self.bound:
            raise TransportError("Cannot receive on an unbound socket")

        try:
            sock.settimeout(timeout)
            data, _ = sock.recvfrom(MAX_DATAGRAM_SIZE)
        except socket.timeout:
            return NO_DATA
        except OSError as e:
            if self._sock is None:
                raise TransportError("Socket closed while receiving") from e
            raise

        return data

    def close(self) -> None:
        """Release the socket. Unblocks a pending receive_next()."""
        sock, self._sock = self._sock, None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # UDP sockets report ENOTCONN here; close still proceeds.
                pass
            sock.close()
        self.bound = False

    @property
    def closed(self) -> bool:
        return self._sock is None

    def __enter__(self) -> "ReceiverSocket":
        return self

    def __exit__(self, *args) -> None:
        self.close()
