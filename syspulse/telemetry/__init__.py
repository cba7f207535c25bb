"""
SysPulse Agent - Telemetry Package

Reads /proc counters and computes utilization.
"""

from .calculator import cpu_percent, ram_percent
from .models import CpuSnapshot, DeliveryOutcome, FailureKind, MemorySnapshot, UtilizationSample
from .reader import TickReader

__all__ = [
    "CpuSnapshot",
    "DeliveryOutcome",
    "FailureKind",
    "MemorySnapshot",
    "TickReader",
    "UtilizationSample",
    "cpu_percent",
    "ram_percent",
]
