# fhirproxy/core/proxy/conversion.py
from __future__ import annotations

from typing import Any

from fhirproxy.core.errors import UnsupportedFormat
from fhirproxy.core.fhir.constants import ContentKind
from fhirproxy.core.fhir.context import FhirContext

from .exchange import ContentPayload


class ConversionPipeline:
    """
    Re-serializes a payload into another kind.

    Parse and encode errors (DataFormatError) propagate to the caller.
    """

    def __init__(self, pretty: bool = True):
        self.pretty = pretty

    def convert(self, context: FhirContext, payload: ContentPayload, target_kind: Any) -> ContentPayload:
        target = _as_kind(target_kind)

        resource = context.new_parser_for_kind(payload.kind).parse_resource(payload.text)
        encoded = context.new_parser_for_kind(target).encode_resource_to_string(resource, pretty=self.pretty)
        return ContentPayload(kind=target, text=encoded)


def _as_kind(value: Any) -> ContentKind:
    if isinstance(value, ContentKind):
        return value
    try:
        return ContentKind(value)
    except ValueError:
        raise UnsupportedFormat(
            message=f"Cannot convert to unsupported format {value!r}",
            details={"target": repr(value)},
        ) from None


__all__ = ["ConversionPipeline"]
