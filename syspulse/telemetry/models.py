"""
SysPulse Agent - Telemetry Models

Snapshots read from /proc and the sample sent to the collector.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


@dataclass(frozen=True)
class CpuSnapshot:
    """Cumulative tick counters from the aggregate cpu line of /proc/stat."""
    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int

    @property
    def idle_total(self) -> int:
        return self.idle + self.iowait

    @property
    def active_total(self) -> int:
        return self.user + self.nice + self.system + self.irq + self.softirq + self.steal

    @property
    def total(self) -> int:
        return self.idle_total + self.active_total


@dataclass(frozen=True)
class MemorySnapshot:
    """MemTotal and MemAvailable in KiB, read in one pass over /proc/meminfo."""
    total: int
    available: int

    @property
    def is_valid(self) -> bool:
        return self.total > 0


@dataclass(frozen=True)
class UtilizationSample:
    """One cycle's CPU and RAM utilization, in percent."""
    cpu_percent: float
    ram_percent: float

    def to_payload(self) -> Dict[str, float]:
        """Convert to the collector's JSON document."""
        return {
            "cpu": round(self.cpu_percent, 2),
            "ram": round(self.ram_percent, 2),
        }


class FailureKind(str, Enum):
    """Why a delivery did not succeed."""
    TRANSPORT = "transport"
    SERVER_REJECTED = "server_rejected"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a single delivery attempt."""
    success: bool
    kind: Optional[FailureKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "DeliveryOutcome":
        return cls(success=True)

    @classmethod
    def failed(cls, kind: FailureKind, message: str) -> "DeliveryOutcome":
        return cls(success=False, kind=kind, message=message)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "success": self.success,
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
        }
