# fhirproxy/core/fhir/parser.py
"""
Parser interface shared by the JSON and XML serializations.

A parsed resource is a plain dict in the FHIR JSON shape: "resourceType"
first, then the elements in document order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from fhirproxy.core.errors import DataFormatError

from .constants import ContentKind
from .structures import StructureCatalogue


Resource = Dict[str, Any]


class FhirParser(ABC):
    """Parse text of one kind into a resource dict, and encode it back."""

    kind: ContentKind

    def __init__(self, catalogue: StructureCatalogue):
        self.catalogue = catalogue

    @abstractmethod
    def parse_resource(self, text: str) -> Resource:
        """Parse text into a resource. Raises DataFormatError on malformed input."""

    @abstractmethod
    def encode_resource_to_string(self, resource: Resource, pretty: bool = False) -> str:
        """Encode a resource. Raises DataFormatError if it cannot be represented."""


def require_resource(data: Any, *, kind: ContentKind) -> Resource:
    """Check that decoded data is a JSON object naming its resourceType."""
    if not isinstance(data, dict):
        raise DataFormatError(
            f"Invalid {kind.value.upper()} content detected, expected a resource object"
        )
    resource_type = data.get("resourceType")
    if not isinstance(resource_type, str) or not resource_type:
        raise DataFormatError(
            f"Invalid {kind.value.upper()} content detected, missing required element: 'resourceType'"
        )
    return data


def ordered_resource(resource: Resource) -> Resource:
    """Copy of resource with resourceType moved to the front."""
    ordered: Resource = {"resourceType": resource["resourceType"]}
    for key, value in resource.items():
        if key != "resourceType":
            ordered[key] = value
    return ordered
