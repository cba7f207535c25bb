"""
SysPulse Agent - Tick Reader

Reads the aggregate CPU tick counters from /proc/stat and memory totals
from /proc/meminfo. Every call performs a fresh read.
"""

from typing import Iterable, Optional

import structlog

from ..errors import UnreadableError
from .models import CpuSnapshot, MemorySnapshot

logger = structlog.get_logger(__name__)

CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal")


def parse_cpu_line(line: str, source: str = "/proc/stat") -> CpuSnapshot:
    """Parse `cpu user nice system idle iowait irq softirq steal ...`.

    Fields beyond the first eight counters (guest, guest_nice) are ignored.
    """
    parts = line.split()
    if not parts or parts[0] != "cpu":
        raise UnreadableError(source, "unexpected format, aggregate cpu line not found")

    values = parts[1:1 + len(CPU_FIELDS)]
    if len(values) < len(CPU_FIELDS):
        raise UnreadableError(
            source, f"expected {len(CPU_FIELDS)} counters, got {len(values)}"
        )

    counters = []
    for name, raw in zip(CPU_FIELDS, values):
        if not _is_counter(raw):
            raise UnreadableError(source, f"invalid {name} counter {raw!r}")
        counters.append(int(raw))

    return CpuSnapshot(*counters)


def parse_meminfo(lines: Iterable[str], source: str = "/proc/meminfo") -> MemorySnapshot:
    """Scan `Key: value unit` lines for MemTotal and MemAvailable.

    The first occurrence of each key wins and scanning stops once both
    have been captured.
    """
    mem_total: Optional[int] = None
    mem_available: Optional[int] = None

    for line in lines:
        parts = line.split()
        if len(parts) < 2:
            continue

        key = parts[0]
        if key == "MemTotal:" and mem_total is None:
            mem_total = _parse_kib(parts[1], key, source)
        elif key == "MemAvailable:" and mem_available is None:
            mem_available = _parse_kib(parts[1], key, source)

        if mem_total is not None and mem_available is not None:
            break

    if not mem_total:
        raise UnreadableError(source, "could not read MemTotal")

    if mem_available is None:
        logger.debug("MemAvailable not reported, assuming 0", source=source)
        mem_available = 0

    return MemorySnapshot(total=mem_total, available=mem_available)


def _is_counter(raw: str) -> bool:
    # ASCII digits only; str.isdigit() also accepts superscripts
    return raw.isascii() and raw.isdecimal()


def _parse_kib(raw: str, key: str, source: str) -> int:
    if not _is_counter(raw):
        raise UnreadableError(source, f"invalid {key.rstrip(':')} value {raw!r}")
    return int(raw)


class TickReader:
    """Reads CPU and memory snapshots from the proc filesystem."""

    def __init__(self, stat_path: str = "/proc/stat", meminfo_path: str = "/proc/meminfo"):
        self.stat_path = stat_path
        self.meminfo_path = meminfo_path

    def read_cpu_snapshot(self) -> CpuSnapshot:
        """Read the aggregate cpu line."""
        try:
            with open(self.stat_path, "r") as f:
                line = f.readline()
        except UnicodeDecodeError as e:
            raise UnreadableError(self.stat_path, f"not valid text: {e}") from e
        except OSError as e:
            raise UnreadableError(self.stat_path, f"cannot open: {e}") from e

        if not line:
            raise UnreadableError(self.stat_path, "file is empty")

        return parse_cpu_line(line, source=self.stat_path)

    def read_memory_snapshot(self) -> MemorySnapshot:
        """Read MemTotal and MemAvailable."""
        try:
            with open(self.meminfo_path, "r") as f:
                return parse_meminfo(f, source=self.meminfo_path)
        except UnicodeDecodeError as e:
            raise UnreadableError(self.meminfo_path, f"not valid text: {e}") from e
        except OSError as e:
            raise UnreadableError(self.meminfo_path, f"cannot open: {e}") from e
