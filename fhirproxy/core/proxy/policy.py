# fhirproxy/core/proxy/policy.py
"""
Format policy

Decides, per direction, which serialization the other side gets and whether
the body has to be converted for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from fhirproxy.core.errors import ConfigurationError
from fhirproxy.core.fhir.constants import ContentKind


class UpstreamFormatMode(str, Enum):
    """
    Serialization the upstream server speaks.

    Configured as "Client", "JSON" or "XML" (case-insensitive).
    """
    CLIENT_MIRROR = "Client"
    FIXED_JSON = "JSON"
    FIXED_XML = "XML"

    @classmethod
    def parse(cls, value: Any) -> "UpstreamFormatMode":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for mode in cls:
                if mode.value.lower() == wanted:
                    return mode
        raise ConfigurationError.unsupported_upstream_format(value)


@dataclass(frozen=True)
class FormatDecision:
    target: ContentKind
    needs_conversion: bool


def target_kind(mode: UpstreamFormatMode, source_kind: ContentKind) -> FormatDecision:
    """Forward direction: what the upstream receives for a body of source_kind."""
    if mode is UpstreamFormatMode.CLIENT_MIRROR:
        return FormatDecision(target=source_kind, needs_conversion=False)
    if mode is UpstreamFormatMode.FIXED_JSON:
        return FormatDecision(target=ContentKind.JSON, needs_conversion=source_kind is not ContentKind.JSON)
    if mode is UpstreamFormatMode.FIXED_XML:
        return FormatDecision(target=ContentKind.XML, needs_conversion=source_kind is not ContentKind.XML)
    raise ConfigurationError.unsupported_upstream_format(mode)


def response_kind(
    mode: UpstreamFormatMode,
    upstream_kind: ContentKind,
    client_kind: ContentKind,
) -> FormatDecision:
    """
    Reverse direction: what the client receives for an upstream reply.

    In CLIENT_MIRROR mode the reply is passed through as-is.
    """
    if mode is UpstreamFormatMode.CLIENT_MIRROR:
        return FormatDecision(target=upstream_kind, needs_conversion=False)
    if mode in (UpstreamFormatMode.FIXED_JSON, UpstreamFormatMode.FIXED_XML):
        return FormatDecision(target=client_kind, needs_conversion=upstream_kind is not client_kind)
    raise ConfigurationError.unsupported_upstream_format(mode)


__all__ = ["UpstreamFormatMode", "FormatDecision", "target_kind", "response_kind"]
