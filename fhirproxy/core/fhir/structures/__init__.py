# fhirproxy/core/fhir/structures/__init__.py
"""
Element catalogues per FHIR version.

Provides:
- StructureCatalogue: lookup of resource and datatype definitions
- load_catalogue(version): build the catalogue for a supported version tag
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from . import dstu2, r4
from .base import (
    BARE_RESOURCES,
    BASE_RESOURCE,
    DOMAIN_RESOURCE,
    PRIMITIVE_TYPES,
    ElementDef,
    TypeDef,
    open_resource,
)


_VERSIONS = {
    dstu2.VERSION: dstu2,
    r4.VERSION: r4,
}

SUPPORTED_VERSIONS = tuple(_VERSIONS)


class StructureCatalogue:
    """
    Definitions for one FHIR version.

    Resources listed in the version but not described get an open definition
    holding only the Resource / DomainResource base elements.
    """

    def __init__(self, version: str, resource_names: FrozenSet[str], definitions: Dict[str, TypeDef]):
        self.version = version
        self.resource_names = resource_names
        self._definitions = definitions

    def is_resource_name(self, name: str) -> bool:
        return name in self.resource_names

    def resource(self, name: str) -> Optional[TypeDef]:
        if name not in self.resource_names:
            return None
        definition = self._definitions.get(name)
        if definition is not None:
            return definition
        base = BASE_RESOURCE if name in BARE_RESOURCES else DOMAIN_RESOURCE
        return open_resource(name, base)

    def definition(self, type_name: str) -> Optional[TypeDef]:
        return self._definitions.get(type_name)

    def describes(self, name: str) -> bool:
        return name in self._definitions


def load_catalogue(version: str) -> StructureCatalogue:
    """Build the catalogue for version (exact tag, see SUPPORTED_VERSIONS)."""
    module = _VERSIONS.get(version)
    if module is None:
        raise KeyError(version)
    return StructureCatalogue(module.VERSION, module.RESOURCE_NAMES, module.build_definitions())


__all__ = [
    "ElementDef",
    "TypeDef",
    "StructureCatalogue",
    "PRIMITIVE_TYPES",
    "SUPPORTED_VERSIONS",
    "load_catalogue",
]
