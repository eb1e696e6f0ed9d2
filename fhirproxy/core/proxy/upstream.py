# fhirproxy/core/proxy/upstream.py
"""
httpx implementation of the upstream caller.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from fhirproxy.core.errors import UpstreamError

from .exchange import HeaderMap
from .interfaces import UpstreamReply, UpstreamRequest


logger = logging.getLogger(__name__)

# Describe the upstream connection, not the reply handed to the client
HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "content-encoding",
    "content-length",
})


class HttpxUpstreamClient:
    """
    Forwards UpstreamRequests with an httpx.AsyncClient.

    No retries: a failed call surfaces as UpstreamError.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_s = timeout_s
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self._transport,
                follow_redirects=False,
            )
        return self._client

    async def forward_request(self, request: UpstreamRequest) -> UpstreamReply:
        content = request.body.encode("utf-8") if isinstance(request.body, str) else request.body
        try:
            response = await self._get_client().request(
                request.method,
                request.url,
                params=list(request.params),
                headers=list(request.headers.items()),
                content=content,
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                message=f"Upstream request to {request.url} failed: {exc}",
                details={"url": request.url, "method": request.method},
                cause=exc,
            ) from exc

        logger.debug("Upstream %s %s answered %s", request.method, request.url, response.status_code)

        headers = HeaderMap(
            (name, value)
            for name, value in response.headers.multi_items()
            if name.lower() not in HOP_BY_HOP_HEADERS
        )
        raw = response.content or None
        body = response.text if raw is not None else None
        return UpstreamReply(status=response.status_code, headers=headers, body=body, raw_body=raw)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["HttpxUpstreamClient", "HOP_BY_HOP_HEADERS"]
