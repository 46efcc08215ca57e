"""
udp-video-stream Command Line
=============================

Entry point for running sender and/or receiver channels.

Usage:
    udp-video-stream send                      # stream configured cameras
    udp-video-stream receive                   # display configured ports
    udp-video-stream run                       # both, in one process
    udp-video-stream --config my.yaml receive --serve

Channels run until SIGINT/SIGTERM. With --serve (or server.enabled in the
config) the FastAPI status server runs in the foreground and owns the
channel lifecycle instead.
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

from udp_video_stream.config import Settings, load_config, setup_logging
from udp_video_stream.orchestrator import StreamOrchestrator, build_channels


logger = logging.getLogger(__name__)


_COMMAND_ROLES = {
    "send": "send",
    "receive": "receive",
    "run": "all",
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="udp-video-stream",
        description="Stream camera frames over UDP, one JPEG per datagram",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: UDP_VIDEO_CONFIG or ./config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override logging.level",
    )
    parser.add_argument(
        "command",
        choices=sorted(_COMMAND_ROLES),
        help="Which channels to run",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP status API (overrides server.enabled)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Use the headless display backend",
    )
    return parser.parse_args(argv)


def _apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates = {}
    if args.log_level:
        updates["logging"] = settings.logging.model_copy(update={"level": args.log_level})
    if args.serve:
        updates["server"] = settings.server.model_copy(update={"enabled": True})
    if args.headless:
        updates["display"] = settings.display.model_copy(update={"backend": "headless"})
    return settings.model_copy(update=updates) if updates else settings


def run(settings: Settings, role: str) -> int:
    """
    Build and run channels until interrupted.

    Returns:
        Process exit code (1 if every channel failed to start)
    """
    channels = build_channels(settings, role=role)
    if not channels:
        logger.error(f"No channels configured for role {role!r}")
        return 1

    orchestrator = StreamOrchestrator(channels)

    if settings.server.enabled:
        import uvicorn

        from udp_video_stream.status import create_app

        app = create_app(orchestrator, settings)
        logger.info(
            f"Status server on {settings.server.host}:{settings.server.port}"
        )
        uvicorn.run(
            app,
            host=settings.server.host,
            port=settings.server.port,
            log_level=settings.logging.level.lower(),
        )
        return 0

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        orchestrator.stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    orchestrator.start()
    exit_code = 0
    try:
        while not orchestrator.wait(timeout=0.5):
            if len(orchestrator.failed_channels()) == len(channels):
                logger.error("All channels failed to start")
                exit_code = 1
                break
    finally:
        orchestrator.stop()

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = _apply_cli_overrides(load_config(args.config), args)
    setup_logging(settings)
    return run(settings, _COMMAND_ROLES[args.command])


if __name__ == "__main__":
    sys.exit(main())
