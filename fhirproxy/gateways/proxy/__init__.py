# fhirproxy/gateways/proxy/__init__.py
"""
Proxy Gateway - HTTP server for the FHIR mediator

Deployable ASGI application that converts FHIR traffic between a client and
an upstream FHIR server.
"""

from .server import ProxyServer
from .app import create_proxy_app

__all__ = [
    "ProxyServer",
    "create_proxy_app",
]
