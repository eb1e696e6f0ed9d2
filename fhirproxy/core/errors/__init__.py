# fhirproxy/core/errors/__init__.py
"""
Error types for the FHIR proxy mediator.

Taxonomy:
- ClientPayloadError: bad request body, answered locally with HTTP 400
- ConfigurationError: unsupported settings, unrecoverable
- ConversionFault / UnsupportedFormat: conversion after validation, unrecoverable
- UpstreamError: transport failure talking to the upstream server

No side effects on import.
"""

from . import codes
from .exceptions import (
    FhirProxyError,
    ConfigurationError,
    DataFormatError,
    ClientPayloadError,
    UnsupportedFormat,
    ConversionFault,
    UpstreamError,
)

__all__ = [
    "codes",
    "FhirProxyError",
    "ConfigurationError",
    "DataFormatError",
    "ClientPayloadError",
    "UnsupportedFormat",
    "ConversionFault",
    "UpstreamError",
]
