# fhirproxy/core/proxy/negotiation.py
"""
Client content negotiation

Decides which serialization the client expects back, from the request
metadata only. Pure and total: no parsing, never fails.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from fhirproxy.core.fhir.constants import FHIR_MIME_JSON, classify_content_type


WILDCARD = "*/*"
FORMAT_PARAM = "_format"


def resolve_client_content_type(
    headers,
    params: Iterable[Tuple[str, str]],
    body_content_type: Optional[str],
) -> str:
    """
    Resolve the client's expected response kind. First match wins:

    1. Accept header, unless it is exactly */* (used verbatim)
    2. first _format query parameter (used verbatim)
    3. the request's own Content-Type, as the canonical JSON or XML MIME type
    4. canonical JSON MIME type

    headers only needs a case-insensitive get().
    """
    accept = headers.get("Accept")
    if accept is not None and accept != WILDCARD:
        return accept

    for key, value in params:
        if key == FORMAT_PARAM:
            return value

    if body_content_type is not None:
        return classify_content_type(body_content_type).mime_type

    return FHIR_MIME_JSON


__all__ = ["resolve_client_content_type", "WILDCARD", "FORMAT_PARAM"]
