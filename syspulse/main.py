"""
SysPulse Agent - Entry Point

Linux system monitor daemon: samples CPU and RAM usage from /proc and
posts it to the SysPulse collector.

Usage:
    syspulse-agent [--config CONFIG_PATH] [--host HOST] [--port PORT]
                   [--interval-ms MS] [--log-level LEVEL]
"""

import argparse
import asyncio
import logging
import signal
import sys
from types import FrameType
from typing import List, Optional

import structlog

from .config import AgentConfig, load_config
from .errors import ConfigError, UnreadableError
from .scheduler import Scheduler

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on top of stdlib logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class SysPulseAgent:
    """Owns the shutdown token and the scheduler."""

    def __init__(self, config: AgentConfig):
        self.config = config
        self._shutdown_event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.scheduler = Scheduler(config, self._shutdown_event)

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    async def start(self) -> None:
        """Run the telemetry loop until shutdown is requested."""
        self._loop = asyncio.get_running_loop()
        logger.info(
            "Starting SysPulse agent",
            name=self.config.name,
            version=self.config.version,
            target=str(self.config.endpoint),
            interval_ms=int(self.config.interval * 1000),
        )
        await self.scheduler.run()
        logger.info("Agent stopped")

    def stop(self) -> None:
        """Request shutdown; the loop exits after its current iteration."""
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._shutdown_event.set)
        else:
            self._shutdown_event.set()

    def handle_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        """Handle shutdown signals."""
        logger.info("Received signal, shutting down", signal=signum)
        self.stop()


def build_config(args: argparse.Namespace) -> AgentConfig:
    """Load the config file and apply command-line overrides."""
    config = load_config(args.config)

    if args.host is not None:
        config["collector"]["host"] = args.host
    if args.port is not None:
        config["collector"]["port"] = args.port
    if args.interval_ms is not None:
        config["telemetry"]["interval_ms"] = args.interval_ms
    if args.log_level is not None:
        config["logging"]["level"] = args.log_level

    return AgentConfig.from_dict(config)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SysPulse Agent - Linux System Monitor Daemon")
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument("--host", help="Collector host")
    parser.add_argument("--port", type=int, help="Collector port")
    parser.add_argument("--interval-ms", type=int, help="Sampling interval in milliseconds")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = parse_args(argv)
    configure_logging(args.log_level or "INFO")

    try:
        config = build_config(args)
    except ConfigError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2

    logging.getLogger().setLevel(config.log_level)
    agent = SysPulseAgent(config)

    # Register signal handlers
    signal.signal(signal.SIGTERM, agent.handle_signal)
    signal.signal(signal.SIGINT, agent.handle_signal)

    try:
        await agent.start()
    except UnreadableError as e:
        logger.error("Failed to initialize CPU monitoring", error=str(e))
        return 1

    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
