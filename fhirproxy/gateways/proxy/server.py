# fhirproxy/gateways/proxy/server.py
"""
Proxy server - FastAPI application

Every path and method is routed to the pipeline. The server only translates
between Starlette requests/responses and the core Exchange/FinalResponse
values; internal faults become plain-text 500s (502 for upstream transport
failures) with no FHIR content.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from fhirproxy import __version__
from fhirproxy.core.errors import FhirProxyError, UpstreamError
from fhirproxy.core.proxy import Exchange, FinalResponse, HeaderMap, ProxyPipeline


logger = logging.getLogger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


async def build_exchange(request: Request) -> Exchange:
    """Exchange for request; the body is kept as the bytes received."""
    raw = await request.body()
    return Exchange(
        method=request.method,
        path=request.url.path,
        params=tuple(request.query_params.multi_items()),
        headers=HeaderMap(request.headers.items()),
        scheme=request.url.scheme,
        host=request.url.hostname or "",
        raw_body=raw or None,
    )


def render_response(final: FinalResponse) -> Response:
    response = Response(
        content=final.body if final.body is not None else b"",
        status_code=final.status,
    )
    # Repeated headers (Set-Cookie) stay separate lines
    for name, value in final.headers.items():
        response.headers.append(name, value)
    return response


class ProxyServer:
    """
    ASGI server around a ProxyPipeline.

    app is the ASGI callable (uvicorn, httpx.ASGITransport).
    """

    def __init__(self, *, pipeline: ProxyPipeline):
        self.pipeline = pipeline
        self.app = FastAPI(
            title="FHIR Proxy Mediator",
            version=__version__,
            lifespan=self._lifespan,
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )
        self.app.state.pipeline = pipeline
        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        yield
        await self.pipeline.aclose()

    def _setup_routes(self) -> None:
        @self.app.api_route("/{path:path}", methods=PROXY_METHODS)
        async def proxy(request: Request, path: str):
            return await self.handle(request)

    async def handle(self, request: Request) -> Response:
        exchange = await build_exchange(request)
        try:
            final = await self.pipeline.process_request(exchange)
        except UpstreamError as exc:
            logger.error("%s Upstream unavailable: %s", exchange.log_prefix, exc.to_dict())
            return PlainTextResponse("Upstream server unavailable", status_code=502)
        except FhirProxyError as exc:
            logger.error("%s Exchange failed: %s", exchange.log_prefix, exc.to_dict())
            return PlainTextResponse("Internal server error", status_code=500)
        except Exception:
            logger.exception("%s Internal fault while processing %s %s", exchange.log_prefix, exchange.method, exchange.path)
            return PlainTextResponse("Internal server error", status_code=500)
        return render_response(final)


__all__ = ["ProxyServer", "build_exchange", "render_response"]
