#!/usr/bin/env python3
"""
Loopback Integration Check
==========================

Standalone script that streams a synthetic camera to a receiver over the
loopback interface and reports throughput.

This script:
    1. Starts a SyntheticCapture sender and a headless receiver
    2. Runs for a configurable duration
    3. Logs channel stats every few seconds
    4. Reports final summary

Usage:
    python scripts/loopback_check.py --duration 30
    python scripts/loopback_check.py --port 4000 --scale 0.6 --quality 60
"""

import argparse
import logging
import os
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from udp_video_stream.channel import ReceiverChannel, SenderChannel
from udp_video_stream.codec import FrameCodec
from udp_video_stream.devices import HeadlessDisplay, SyntheticCapture
from udp_video_stream.orchestrator import StreamOrchestrator
from udp_video_stream.protocol import ProtocolEnvelope


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_check(
    port: int,
    duration: int,
    scale: float,
    quality: int,
    fps: float,
    report_interval: int,
) -> dict:
    """
    Run the loopback check.

    Args:
        port: UDP port used on 127.0.0.1
        duration: Check duration in seconds
        scale: Sender downscale factor
        quality: Sender JPEG quality
        fps: Synthetic capture rate
        report_interval: Seconds between progress reports

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("Loopback Integration Check")
    logger.info("=" * 60)
    logger.info(f"Port: {port}")
    logger.info(f"Duration: {duration} seconds")
    logger.info(f"Scale: {scale}, quality: {quality}, capture fps: {fps}")
    logger.info("=" * 60)

    display = HeadlessDisplay()
    receiver = ReceiverChannel(
        name="loopback-receiver",
        port=port,
        host="127.0.0.1",
        envelope=ProtocolEnvelope(FrameCodec()),
        display=display,
    )
    sender = SenderChannel(
        name="loopback-sender",
        host="127.0.0.1",
        port=port,
        envelope=ProtocolEnvelope(FrameCodec(quality=quality, scale=scale)),
        capture=SyntheticCapture(fps=fps),
    )
    orchestrator = StreamOrchestrator([receiver, sender])
    orchestrator.start()

    start_time = time.time()
    last_report_time = start_time
    last_frame_count = 0

    try:
        while time.time() - start_time < duration:
            time_since_report = time.time() - last_report_time
            if time_since_report >= report_interval:
                received = receiver.metrics.frames_received
                rate = (received - last_frame_count) / time_since_report

                logger.info("-" * 40)
                logger.info(f"Progress Report (elapsed: {time.time() - start_time:.0f}s)")
                logger.info(f"  Frames sent: {sender.metrics.frames_sent}")
                logger.info(f"  Frames received: {received}")
                logger.info(f"  Current FPS: {rate:.1f}")
                logger.info(f"  Placeholders shown: {receiver.metrics.placeholders_shown}")
                logger.info(f"  Send errors: {sender.metrics.send_errors}")

                last_report_time = time.time()
                last_frame_count = received

            time.sleep(0.5)

    except KeyboardInterrupt:
        logger.info("Check interrupted by user")
    finally:
        orchestrator.stop()

    # Final report
    total_time = time.time() - start_time
    sent = sender.metrics.frames_sent
    received = receiver.metrics.frames_received
    avg_fps = received / total_time if total_time > 0 else 0
    avg_size = sender.metrics.bytes_sent / sent if sent else 0

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Frames sent: {sent}")
    logger.info(f"Frames received: {received}")
    logger.info(f"Average FPS: {avg_fps:.1f}")
    logger.info(f"Average datagram size: {avg_size:.0f} bytes")
    logger.info(f"Received frame shape: {receiver.last_frame_shape}")
    logger.info(f"Decode failures: {receiver.metrics.decode_failures}")
    logger.info("=" * 60)

    if received > 0:
        logger.info("CHECK PASSED - Frames received over loopback")
    else:
        logger.error("CHECK FAILED - No frames received")

    return {
        "duration": total_time,
        "frames_sent": sent,
        "frames_received": received,
        "avg_fps": avg_fps,
        "avg_datagram_size": avg_size,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Loopback integration check for udp-video-stream"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("UDP_VIDEO_CHECK_PORT", "4000")),
        help="UDP port on 127.0.0.1 (default: 4000)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=30,
        help="Check duration in seconds (default: 30)",
    )
    parser.add_argument("--scale", type=float, default=0.6, help="Downscale factor")
    parser.add_argument("--quality", type=int, default=60, help="JPEG quality")
    parser.add_argument("--fps", type=float, default=30.0, help="Synthetic capture rate")
    parser.add_argument(
        "--report-interval",
        type=int,
        default=5,
        help="Seconds between progress reports (default: 5)",
    )

    args = parser.parse_args()

    result = run_check(
        port=args.port,
        duration=args.duration,
        scale=args.scale,
        quality=args.quality,
        fps=args.fps,
        report_interval=args.report_interval,
    )

    # Exit with appropriate code
    sys.exit(0 if result["frames_received"] > 0 else 1)


if __name__ == "__main__":
    main()
