# fhirproxy/__init__.py
"""
fhirproxy - FHIR converting proxy mediator

Accepts HTTP requests carrying FHIR resources, optionally validates them,
converts between the JSON and XML serializations as configured, forwards
them to an upstream FHIR server and converts the reply back for the client.

Usage:
    >>> from fhirproxy.config import ProxySettings
    >>> from fhirproxy.gateways.proxy import create_proxy_app
    >>> app = create_proxy_app(ProxySettings(upstream_format="XML"))

Command line:
    fhirproxy proxy --conf mediator.yml
    fhirproxy convert patient.json --to xml
    fhirproxy validate patient.xml
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
