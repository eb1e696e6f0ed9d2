# fhirproxy/core/fhir/__init__.py
"""
FHIR grammar capability

Parse, encode and validate FHIR resources in their JSON and XML
serializations for the DSTU2 and R4 generations of the resource model.

Resources are plain dicts in the FHIR JSON shape.
"""

from .constants import (
    FHIR_MIME_JSON,
    FHIR_MIME_XML,
    ContentKind,
    classify_content_type,
    is_fhir_content_type,
    response_content_type,
)
from .context import FhirContext, normalize_version
from .json_parser import JsonParser
from .outcome import IssueSeverity, ValidationIssue, new_operation_outcome, outcome_from_exception
from .parser import FhirParser, Resource
from .structures import SUPPORTED_VERSIONS
from .validation import FhirValidator, ValidationResult
from .xml_parser import XmlParser

__all__ = [
    "FHIR_MIME_JSON",
    "FHIR_MIME_XML",
    "ContentKind",
    "classify_content_type",
    "is_fhir_content_type",
    "response_content_type",
    "FhirContext",
    "normalize_version",
    "JsonParser",
    "XmlParser",
    "FhirParser",
    "Resource",
    "FhirValidator",
    "ValidationResult",
    "ValidationIssue",
    "IssueSeverity",
    "new_operation_outcome",
    "outcome_from_exception",
    "SUPPORTED_VERSIONS",
]
