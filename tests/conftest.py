"""
SysPulse Agent - Test Fixtures

In-memory transport and /proc file fixtures.
"""

from typing import List, Optional

import pytest

from syspulse.errors import TransportError
from syspulse.reporter.transport import MAX_RESPONSE_BYTES, Transport

PROC_STAT = (
    "cpu  100 0 50 850 0 0 0 0 0 0\n"
    "cpu0 50 0 25 425 0 0 0 0 0 0\n"
    "cpu1 50 0 25 425 0 0 0 0 0 0\n"
    "intr 12345 0 0\n"
    "ctxt 67890\n"
)

PROC_MEMINFO = (
    "MemTotal:        8000000 kB\n"
    "MemFree:         1000000 kB\n"
    "MemAvailable:    2000000 kB\n"
    "Buffers:          100000 kB\n"
    "Cached:           900000 kB\n"
)


class FakeTransport(Transport):
    """Transport that records traffic instead of touching the network."""

    def __init__(self, factory: "FakeTransportFactory", host: str, port: int, timeout: float):
        super().__init__(host, port, timeout)
        self._factory = factory
        self._open = False
        self.sent: List[bytes] = []
        self.closed = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        if self._factory.fail_on == "open":
            raise TransportError("Connection refused")
        self._open = True

    async def send(self, data: bytes) -> None:
        if self._factory.fail_on == "send":
            raise TransportError("Broken pipe")
        self.sent.append(data)

    async def receive(self, max_bytes: int = MAX_RESPONSE_BYTES) -> bytes:
        if self._factory.fail_on == "receive":
            raise TransportError("No response within 5.0s")
        return self._factory.response[:max_bytes]

    async def close(self) -> None:
        self._open = False
        self.closed = True


class FakeTransportFactory:
    """Creates FakeTransport sessions and keeps them for inspection."""

    def __init__(self, response: bytes = b"HTTP/1.1 200 OK\r\n\r\n", fail_on: Optional[str] = None):
        self.response = response
        self.fail_on = fail_on
        self.sessions: List[FakeTransport] = []

    def __call__(self, host: str, port: int, timeout: float) -> FakeTransport:
        session = FakeTransport(self, host, port, timeout)
        self.sessions.append(session)
        return session

    @property
    def open_sessions(self) -> List[FakeTransport]:
        return [s for s in self.sessions if s.is_open]


@pytest.fixture
def transport_factory():
    """Fake transport answering 200 OK."""
    return FakeTransportFactory()


@pytest.fixture
def proc_files(tmp_path):
    """Write /proc/stat and /proc/meminfo stand-ins."""
    stat = tmp_path / "stat"
    meminfo = tmp_path / "meminfo"
    stat.write_text(PROC_STAT)
    meminfo.write_text(PROC_MEMINFO)
    return stat, meminfo
