"""
SysPulse Agent - Errors

Failure taxonomy shared by the reader, reporter and scheduler.
"""

from typing import Optional


class SysPulseError(Exception):
    """Base class for agent errors."""


class UnreadableError(SysPulseError):
    """A local OS data source could not be read or parsed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class TransportError(SysPulseError):
    """The network session could not be opened, or send/receive failed."""


class ServerRejectedError(SysPulseError):
    """A response was received but did not signal success."""

    def __init__(self, excerpt: str, message: Optional[str] = None):
        self.excerpt = excerpt
        super().__init__(message or f"Server rejected telemetry: {excerpt!r}")


class ConfigError(SysPulseError):
    """Configuration value is missing or out of range."""
