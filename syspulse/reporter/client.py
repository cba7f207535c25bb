"""
SysPulse Agent - Reporter

Encodes a utilization sample as JSON, frames it as an HTTP/1.1 POST and
delivers it to the collector over a fresh transport session.
"""

import json
from dataclasses import dataclass
from typing import Callable

import structlog

from ..errors import ServerRejectedError, TransportError
from ..telemetry.models import DeliveryOutcome, FailureKind, UtilizationSample
from .transport import MAX_RESPONSE_BYTES, TcpTransport, Transport

logger = structlog.get_logger(__name__)

TELEMETRY_PATH = "/api/telemetry"
EXCERPT_LENGTH = 50

TransportFactory = Callable[[str, int, float], Transport]


@dataclass(frozen=True)
class Endpoint:
    """Address of the telemetry collector."""
    host: str = "127.0.0.1"
    port: int = 3000
    path: str = TELEMETRY_PATH

    def __str__(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"


def encode_payload(sample: UtilizationSample) -> bytes:
    """Compact JSON body: {"cpu":<n>,"ram":<n>}."""
    return json.dumps(sample.to_payload(), separators=(",", ":")).encode("utf-8")


def build_request(endpoint: Endpoint, body: bytes) -> bytes:
    """Frame the body as a single POST that closes the connection afterwards."""
    head = (
        f"POST {endpoint.path} HTTP/1.1\r\n"
        f"Host: {endpoint.host}:{endpoint.port}\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return head.encode("ascii") + body


def check_response(response: str) -> None:
    """Raise ServerRejectedError unless the response mentions status 200.

    Any occurrence of "200" counts as success; the status line is not parsed.
    """
    if "200" not in response:
        raise ServerRejectedError(response[:EXCERPT_LENGTH])


class Reporter:
    """Delivers samples to the collector, one connection per delivery."""

    def __init__(self, transport_factory: TransportFactory = TcpTransport, timeout: float = 5.0):
        self._transport_factory = transport_factory
        self._timeout = timeout

    async def deliver(self, endpoint: Endpoint, sample: UtilizationSample) -> DeliveryOutcome:
        """Send one sample. Never raises for delivery failures."""
        request = build_request(endpoint, encode_payload(sample))
        transport = self._transport_factory(endpoint.host, endpoint.port, self._timeout)

        try:
            await transport.open()
            await transport.send(request)
            raw = await transport.receive(MAX_RESPONSE_BYTES)
            check_response(raw.decode("utf-8", errors="replace"))
        except TransportError as e:
            logger.debug("Transport failure", endpoint=str(endpoint), error=str(e))
            return DeliveryOutcome.failed(FailureKind.TRANSPORT, str(e))
        except ServerRejectedError as e:
            logger.debug("Collector rejected sample", endpoint=str(endpoint), excerpt=e.excerpt)
            return DeliveryOutcome.failed(FailureKind.SERVER_REJECTED, e.excerpt)
        finally:
            await transport.close()

        return DeliveryOutcome.ok()
