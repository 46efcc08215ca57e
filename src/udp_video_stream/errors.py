"""
Exceptions
==========

Error types raised by the streaming components.

Only setup-time problems are raised. Once a channel is running, transient
I/O gaps and malformed payloads are converted into empty frames instead.
"""


class StreamError(Exception):
    """Base class for all udp-video-stream errors."""
    pass


class CodecError(StreamError, ValueError):
    """Raised when a codec is constructed with invalid parameters."""
    pass


class TransportError(StreamError):
    """Raised when a UDP socket cannot be created or is used while closed."""
    pass
