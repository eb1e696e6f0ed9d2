# fhirproxy/core/proxy/interfaces.py
"""
Proxy layer interfaces

Values exchanged with the two external collaborators of an exchange (the
upstream caller and the responder), and their protocols. The core stays
independent of the HTTP implementation behind them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

from .exchange import Body, HeaderMap


@dataclass(frozen=True)
class UpstreamRequest:
    """Outbound call to the upstream FHIR server."""
    method: str
    scheme: str
    host: str
    port: int
    path: str
    headers: HeaderMap = field(default_factory=HeaderMap)
    params: Tuple[Tuple[str, str], ...] = ()
    body: Optional[Body] = None

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{self.path}"


@dataclass(frozen=True)
class UpstreamReply:
    """
    Reply of the upstream server.

    body is the text decoded with the reply's charset; raw_body holds the
    bytes as received, relayed unchanged when the body is not converted.
    """
    status: int
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Optional[str] = None
    raw_body: Optional[bytes] = None

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")


@dataclass(frozen=True)
class FinalResponse:
    """Response returned to the client."""
    status: int
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Optional[Body] = None

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")


class UpstreamClient(Protocol):
    """
    Upstream caller

    Concrete implementation (HttpxUpstreamClient) lives in core/proxy/upstream.py.
    """

    async def forward_request(self, request: UpstreamRequest) -> UpstreamReply:
        """Send request upstream. Raises UpstreamError on transport failure."""
        ...


class Responder(Protocol):
    """Owning collaborator notified when an exchange terminates."""

    async def respond(self, response: FinalResponse) -> None:
        ...

    async def fail(self, error: BaseException) -> None:
        """Internal fault: no domain content goes back to the client."""
        ...


__all__ = [
    "UpstreamRequest",
    "UpstreamReply",
    "FinalResponse",
    "UpstreamClient",
    "Responder",
]
