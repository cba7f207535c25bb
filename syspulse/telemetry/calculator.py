"""
SysPulse Agent - Usage Calculator

Turns tick and memory snapshots into utilization percentages. Stateless:
callers own the snapshots and pass both operands on every call.
"""

from .models import CpuSnapshot, MemorySnapshot


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def cpu_percent(prev: CpuSnapshot, curr: CpuSnapshot) -> float:
    """CPU utilization over the ticks elapsed between two snapshots."""
    total_delta = curr.total - prev.total
    idle_delta = curr.idle_total - prev.idle_total

    # No elapsed ticks, or counters went backwards
    if total_delta <= 0:
        return 0.0

    return _clamp(100.0 * (total_delta - idle_delta) / total_delta)


def ram_percent(snapshot: MemorySnapshot) -> float:
    """Share of MemTotal that is not available."""
    if not snapshot.is_valid:
        raise ValueError("MemTotal is zero, memory snapshot is invalid")

    return _clamp(100.0 * (snapshot.total - snapshot.available) / snapshot.total)
