# fhirproxy/gateways/__init__.py
"""
Gateways - Deployable data plane services

ASGI/HTTP servers that accept external requests, route them through the core
logic and compose the concrete upstream client.

Architecture principle: gateways/ can import from core/, core/ never imports
from gateways/.
"""
