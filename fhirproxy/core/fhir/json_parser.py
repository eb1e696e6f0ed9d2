# fhirproxy/core/fhir/json_parser.py
from __future__ import annotations

import json

from fhirproxy.core.errors import DataFormatError

from .constants import ContentKind
from .parser import FhirParser, Resource, ordered_resource, require_resource


class JsonParser(FhirParser):
    """FHIR JSON serialization."""

    kind = ContentKind.JSON

    def parse_resource(self, text: str) -> Resource:
        if text is None or not text.strip():
            raise DataFormatError("Failed to parse JSON content, the body is empty")
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as exc:
            # JSONDecodeError is a ValueError, so are integer literals over the digit limit
            raise DataFormatError(
                f"Failed to parse JSON content, error was: {exc}",
                cause=exc,
            ) from exc
        return require_resource(data, kind=self.kind)

    def encode_resource_to_string(self, resource: Resource, pretty: bool = False) -> str:
        require_resource(resource, kind=self.kind)
        try:
            if pretty:
                return json.dumps(ordered_resource(resource), indent=2, ensure_ascii=False)
            return json.dumps(ordered_resource(resource), separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError, RecursionError) as exc:
            raise DataFormatError(f"Failed to encode resource as JSON: {exc}", cause=exc) from exc
