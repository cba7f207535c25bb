"""
SysPulse Agent - Transport

Connection-oriented session used by the reporter. One transport instance
is one session: opened, used for a single request and closed.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ..errors import TransportError

logger = structlog.get_logger(__name__)

MAX_RESPONSE_BYTES = 1023


class Transport(ABC):
    """Session capability: open, send, receive once, close."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the session is currently open."""
        pass

    @abstractmethod
    async def open(self) -> None:
        """Open the session. Raises TransportError."""
        pass

    @abstractmethod
    async def send(self, data: bytes) -> None:
        """Send all bytes. Raises TransportError."""
        pass

    @abstractmethod
    async def receive(self, max_bytes: int = MAX_RESPONSE_BYTES) -> bytes:
        """Read once, at most max_bytes. Raises TransportError."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the session. Safe to call more than once."""
        pass


class TcpTransport(Transport):
    """TCP session over asyncio streams with a bounded timeout."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        super().__init__(host, port, timeout)
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    async def open(self) -> None:
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(f"Connection to {self.host}:{self.port} timed out") from e
        except (OSError, ValueError) as e:
            # ValueError covers host names the idna codec rejects
            raise TransportError(f"Connection to {self.host}:{self.port} failed: {e}") from e

        logger.debug("Connected to collector", host=self.host, port=self.port)

    async def send(self, data: bytes) -> None:
        if not self._writer:
            raise TransportError("Session is not open")

        try:
            self._writer.write(data)
            await asyncio.wait_for(self._writer.drain(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TransportError("Sending request timed out") from e
        except OSError as e:
            raise TransportError(f"Failed to send request: {e}") from e

    async def receive(self, max_bytes: int = MAX_RESPONSE_BYTES) -> bytes:
        if not self._reader:
            raise TransportError("Session is not open")

        try:
            return await asyncio.wait_for(self._reader.read(max_bytes), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"No response within {self.timeout}s") from e
        except OSError as e:
            raise TransportError(f"Failed to receive response: {e}") from e

    async def close(self) -> None:
        writer = self._writer
        self._reader = None
        self._writer = None
        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug("Error while closing session", error=str(e))
