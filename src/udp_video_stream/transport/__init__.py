"""
Transport Module
================

UDP datagram endpoints.

    - SenderSocket: fire-and-forget datagrams to a fixed destination
    - ReceiverSocket: bind + bounded or unbounded wait for the next datagram
    - ReceivePolicy: BLOCKING or TIMEOUT_FALLBACK
"""

from udp_video_stream.transport.sockets import (
    NO_DATA,
    ReceivePolicy,
    ReceiverSocket,
    SenderSocket,
)


__all__ = [
    "NO_DATA",
    "ReceivePolicy",
    "ReceiverSocket",
    "SenderSocket",
]
