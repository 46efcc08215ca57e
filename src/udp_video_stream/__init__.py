"""
udp-video-stream
================

Live camera video over UDP, one compressed still frame per datagram.

The receiving side always displays whatever frame most recently arrived.
There is no fragmentation, acknowledgment, sequencing or encryption: a frame
that does not fit in one datagram is simply not delivered.

Components:
    - codec: Downscale + JPEG/WebP compression of frames
    - protocol: pack/unpack contract between frames and wire bytes
    - transport: UDP sender and receiver sockets
    - devices: Camera capture and window display collaborators
    - channel: Send and receive loops (one thread each)
    - orchestrator: Runs N channels concurrently

Example:
    from udp_video_stream.config import load_config
    from udp_video_stream.orchestrator import StreamOrchestrator, build_channels

    settings = load_config("config.yaml")
    orchestrator = StreamOrchestrator(build_channels(settings, role="receive"))
    orchestrator.start()
    orchestrator.wait()
"""

__version__ = "0.1.0"
__author__ = "udp-video-stream contributors"

__all__ = [
    "__version__",
]
