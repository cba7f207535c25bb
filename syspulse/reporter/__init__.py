"""
SysPulse Agent - Reporter Package

Delivers telemetry samples to the collector over HTTP.
"""

from .client import Endpoint, Reporter, build_request, check_response, encode_payload
from .transport import TcpTransport, Transport

__all__ = [
    "Endpoint",
    "Reporter",
    "TcpTransport",
    "Transport",
    "build_request",
    "check_response",
    "encode_payload",
]
