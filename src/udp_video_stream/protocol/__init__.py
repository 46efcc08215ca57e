"""
Protocol Module
===============

Frame <-> datagram payload conversion.
"""

from udp_video_stream.protocol.envelope import (
    ProtocolEnvelope,
    ProtocolKind,
    create_envelope,
)


__all__ = [
    "ProtocolEnvelope",
    "ProtocolKind",
    "create_envelope",
]
