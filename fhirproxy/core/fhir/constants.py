# fhirproxy/core/fhir/constants.py
"""
Canonical FHIR media types and content classification.

The two MIME constants are used for every header the mediator writes, and
substring classification ("json" / "xml") is used for every header it reads.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


FHIR_MIME_JSON = "application/json+fhir"
FHIR_MIME_XML = "application/xml+fhir"

FHIR_NS = "http://hl7.org/fhir"
XHTML_NS = "http://www.w3.org/1999/xhtml"


class ContentKind(str, Enum):
    """Serialization family of a FHIR resource."""
    JSON = "json"
    XML = "xml"

    @property
    def mime_type(self) -> str:
        return FHIR_MIME_JSON if self is ContentKind.JSON else FHIR_MIME_XML


def classify_content_type(content_type: Optional[str]) -> ContentKind:
    """
    Classify a media type string (or _format value) into JSON or XML.

    Anything mentioning "json" is JSON, everything else is XML. A missing
    value is treated as JSON, the mediator's default format.
    """
    if content_type is None:
        return ContentKind.JSON
    return ContentKind.JSON if "json" in content_type else ContentKind.XML


def is_fhir_content_type(content_type: Optional[str]) -> bool:
    """True if the media type looks like a JSON or XML payload."""
    if not content_type:
        return False
    return "json" in content_type or "xml" in content_type


def response_content_type(resolved: str) -> str:
    """
    Content-Type header value for a body encoded in the client's resolved kind.

    A concrete media type is echoed back verbatim; shorthand _format values
    ("json", "xml") and Accept lists fall back to the canonical MIME type.
    """
    if "/" in resolved and "," not in resolved and "*" not in resolved:
        return resolved
    return classify_content_type(resolved).mime_type
