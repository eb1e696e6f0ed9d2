# fhirproxy/gateways/proxy/app.py
"""
Proxy gateway application factory

Composes core business logic with the httpx upstream client to create a
deployable ASGI application.
"""

from __future__ import annotations

from typing import Optional

from fhirproxy.config.settings import ProxySettings
from fhirproxy.core.proxy import HttpxUpstreamClient, ProxyPipeline, UpstreamClient

from .server import ProxyServer


def create_proxy_app(
    settings: Optional[ProxySettings] = None,
    *,
    upstream_client: Optional[UpstreamClient] = None,
):
    """
    Build the ASGI app for the mediator.

    This is the single composition root used by:
    - CLI: fhirproxy proxy
    - Tests: httpx.ASGITransport(app=...)

    app.state.pipeline exposes the pipeline for reconfiguration.
    """
    settings = settings or ProxySettings.default()
    if upstream_client is None:
        upstream_client = HttpxUpstreamClient(timeout_s=settings.upstream_timeout_s)

    pipeline = ProxyPipeline(settings=settings, upstream_client=upstream_client)
    server = ProxyServer(pipeline=pipeline)
    return server.app
