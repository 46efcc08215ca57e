"""
Channel Module
==============

Independent send and receive pipelines, one thread each.

    - StreamChannel: shared UNBOUND -> BOUND -> RUNNING -> STOPPED lifecycle
    - SenderChannel: capture -> overlay -> pack -> send
    - ReceiverChannel: receive -> unpack -> display (or placeholder)
    - ChannelMetrics: per-channel counters

Example:
    stop = threading.Event()
    channel = ReceiverChannel(
        name="receiver-0",
        port=4000,
        envelope=ProtocolEnvelope(FrameCodec()),
        display=OpenCVDisplay(),
        stop_event=stop,
    )
    thread = threading.Thread(target=channel.run, name=channel.name, daemon=True)
    thread.start()
    ...
    channel.stop()
    thread.join()
"""

from udp_video_stream.channel.base import ChannelState, StreamChannel
from udp_video_stream.channel.metrics import ChannelMetrics
from udp_video_stream.channel.receiver import ReceiverChannel
from udp_video_stream.channel.sender import SenderChannel


__all__ = [
    "ChannelMetrics",
    "ChannelState",
    "ReceiverChannel",
    "SenderChannel",
    "StreamChannel",
]
