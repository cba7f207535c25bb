"""
SysPulse Agent - Scheduler

Drives the sampling cycle: read ticks, compute utilization, deliver, then
wait out the rest of the interval. One cycle is in flight at a time.
"""

import asyncio
import time
from enum import Enum
from typing import Dict, Optional

import structlog

from .config import AgentConfig
from .errors import UnreadableError
from .reporter import Reporter
from .telemetry import CpuSnapshot, TickReader, UtilizationSample, cpu_percent, ram_percent

logger = structlog.get_logger(__name__)


class SchedulerState(str, Enum):
    """Scheduler lifecycle."""
    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """Interval-paced sampling and delivery loop."""

    def __init__(
        self,
        config: AgentConfig,
        shutdown_event: asyncio.Event,
        reader: Optional[TickReader] = None,
        reporter: Optional[Reporter] = None,
    ):
        self.config = config
        self._shutdown_event = shutdown_event
        self.reader = reader or TickReader(config.stat_path, config.meminfo_path)
        self.reporter = reporter or Reporter(timeout=config.timeout)

        self._state = SchedulerState.INITIALIZING
        self._baseline: Optional[CpuSnapshot] = None
        self.stats: Dict[str, int] = {"cycles": 0, "delivered": 0, "failed": 0, "skipped": 0}

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    @property
    def baseline(self) -> Optional[CpuSnapshot]:
        return self._baseline

    async def initialize(self) -> None:
        """Take the CPU baseline. UnreadableError here is fatal."""
        self._state = SchedulerState.INITIALIZING
        self._baseline = self.reader.read_cpu_snapshot()
        logger.debug("CPU baseline acquired", total=self._baseline.total)

        # Make sure the first cycle sees elapsed ticks
        await asyncio.sleep(self.config.warmup)

    async def run(self) -> None:
        """Run cycles until the shutdown event is set."""
        await self.initialize()

        self._state = SchedulerState.RUNNING
        logger.info(
            "Telemetry loop started",
            endpoint=str(self.config.endpoint),
            interval=self.config.interval,
        )

        try:
            while not self._shutdown_event.is_set():
                cycle_start = time.monotonic()
                try:
                    await self.run_cycle()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.exception("Cycle error", error=str(e))
                    self.stats["failed"] += 1

                await self._pace(cycle_start)
        finally:
            self._state = SchedulerState.STOPPED
            logger.info("Telemetry loop stopped", **self.stats)

    async def run_cycle(self) -> bool:
        """Run one read/compute/deliver iteration. Returns True if delivered."""
        if self._baseline is None:
            raise RuntimeError("Scheduler not initialized")

        self.stats["cycles"] += 1

        try:
            current = self.reader.read_cpu_snapshot()
        except UnreadableError as e:
            logger.warning("Failed to read CPU ticks", error=str(e))
            self.stats["skipped"] += 1
            return False

        cpu = cpu_percent(self._baseline, current)
        self._baseline = current

        try:
            memory = self.reader.read_memory_snapshot()
        except UnreadableError as e:
            logger.warning("Failed to read RAM usage", error=str(e))
            self.stats["skipped"] += 1
            return False

        if not memory.is_valid:
            logger.warning("Invalid memory snapshot", total=memory.total)
            self.stats["skipped"] += 1
            return False

        sample = UtilizationSample(cpu_percent=cpu, ram_percent=ram_percent(memory))
        logger.info("Utilization sampled", **sample.to_payload())

        outcome = await self.reporter.deliver(self.config.endpoint, sample)
        if not outcome.success:
            logger.warning(
                "Failed to send telemetry (server may be down)",
                kind=outcome.kind.value if outcome.kind else None,
                error=outcome.message,
            )
            self.stats["failed"] += 1
            return False

        self.stats["delivered"] += 1
        return True

    async def _pace(self, cycle_start: float) -> None:
        """Sleep for what remains of the interval, waking early on shutdown."""
        sleep_for = self.config.interval - (time.monotonic() - cycle_start)
        if sleep_for <= 0:
            return

        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=sleep_for)
        except asyncio.TimeoutError:
            pass
