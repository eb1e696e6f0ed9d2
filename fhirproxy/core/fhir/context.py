# fhirproxy/core/fhir/context.py
"""
FhirContext - version-bound parse / encode / validate capability.

Building a context loads the element catalogue of one FHIR version, which is
the expensive part; parsers and validators created from it are cheap.
"""

from __future__ import annotations

import logging
from typing import Optional

from fhirproxy.core.errors import ConfigurationError

from .constants import ContentKind, classify_content_type
from .json_parser import JsonParser
from .parser import FhirParser
from .structures import SUPPORTED_VERSIONS, StructureCatalogue, load_catalogue
from .validation import FhirValidator
from .xml_parser import XmlParser


logger = logging.getLogger(__name__)


def normalize_version(tag: str) -> Optional[str]:
    """Canonical version tag for tag (case-insensitive), or None if unsupported."""
    if not isinstance(tag, str):
        return None
    wanted = tag.strip().upper()
    for version in SUPPORTED_VERSIONS:
        if version.upper() == wanted:
            return version
    return None


class FhirContext:
    def __init__(self, catalogue: StructureCatalogue):
        self.catalogue = catalogue

    @property
    def version(self) -> str:
        return self.catalogue.version

    @classmethod
    def for_version(cls, tag: str) -> "FhirContext":
        """Build the context for tag ("DSTU2" or "R4"). Raises ConfigurationError otherwise."""
        version = normalize_version(tag)
        if version is None:
            raise ConfigurationError.unsupported_fhir_version(tag)
        logger.info("Initializing FHIR context %s", version)
        return cls(load_catalogue(version))

    def new_json_parser(self) -> JsonParser:
        return JsonParser(self.catalogue)

    def new_xml_parser(self) -> XmlParser:
        return XmlParser(self.catalogue)

    def new_parser_for_kind(self, kind: ContentKind) -> FhirParser:
        if kind is ContentKind.JSON:
            return self.new_json_parser()
        return self.new_xml_parser()

    def new_parser(self, content_type: Optional[str]) -> FhirParser:
        """Parser for a media type or _format value, classified by substring."""
        return self.new_parser_for_kind(classify_content_type(content_type))

    def new_validator(self) -> FhirValidator:
        return FhirValidator(self.catalogue)

    def __repr__(self) -> str:
        return f"FhirContext(version={self.version!r})"
