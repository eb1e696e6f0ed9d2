# fhirproxy/core/fhir/structures/base.py
"""
Element catalogue building blocks.

A catalogue describes, per FHIR version, the elements of the datatypes and
resources the mediator knows about: their type, cardinality, required code
binding and choice group. The XML parser uses it to decide which elements
repeat and which JSON type a primitive takes; the validator uses it for the
structural checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple


# JSON representation of primitive types
BOOLEAN_TYPES: FrozenSet[str] = frozenset({"boolean"})
INTEGER_TYPES: FrozenSet[str] = frozenset({"integer", "positiveInt", "unsignedInt"})
DECIMAL_TYPES: FrozenSet[str] = frozenset({"decimal"})
STRING_TYPES: FrozenSet[str] = frozenset({
    "string", "code", "id", "uri", "url", "canonical", "oid", "uuid",
    "markdown", "date", "dateTime", "instant", "time", "base64Binary",
})
PRIMITIVE_TYPES: FrozenSet[str] = BOOLEAN_TYPES | INTEGER_TYPES | DECIMAL_TYPES | STRING_TYPES

XHTML = "xhtml"
RESOURCE = "Resource"

# Abstract bases every definition derives from
ELEMENT = "Element"
BACKBONE_ELEMENT = "BackboneElement"
BASE_RESOURCE = "Resource"
DOMAIN_RESOURCE = "DomainResource"


@dataclass(frozen=True)
class ElementDef:
    name: str
    type: str
    min: int = 0
    max: str = "1"
    binding: Optional[FrozenSet[str]] = None
    choice: Optional[str] = None

    @property
    def repeats(self) -> bool:
        return self.max == "*"

    @property
    def is_primitive(self) -> bool:
        return self.type in PRIMITIVE_TYPES

    @property
    def is_resource(self) -> bool:
        return self.type == RESOURCE

    @property
    def is_xhtml(self) -> bool:
        return self.type == XHTML


@dataclass(frozen=True)
class TypeDef:
    """
    Definition of a datatype, backbone element or resource.

    open definitions only know their base elements; anything else found in
    an instance is accepted as-is.
    """
    name: str
    base: str
    elements: Mapping[str, ElementDef] = field(default_factory=dict)
    open: bool = False

    @property
    def is_resource(self) -> bool:
        return self.base in (BASE_RESOURCE, DOMAIN_RESOURCE)

    def get(self, element_name: str) -> Optional[ElementDef]:
        return self.elements.get(element_name)

    def required(self) -> List[ElementDef]:
        return [e for e in self.elements.values() if e.min > 0]

    def choice_groups(self) -> Dict[str, List[str]]:
        groups: Dict[str, List[str]] = {}
        for element in self.elements.values():
            if element.choice:
                groups.setdefault(element.choice, []).append(element.name)
        return groups


def parse_cardinality(card: str) -> Tuple[int, str]:
    low, high = card.split("..")
    return int(low), high


def el(
    name: str,
    type_: str,
    card: str = "0..1",
    binding: Optional[Iterable[str]] = None,
) -> List[ElementDef]:
    """
    Declare one element, or one element per type for choice elements.

    el("deceased[x]", "boolean|dateTime") declares deceasedBoolean and
    deceasedDateTime in the "deceased" choice group.
    """
    low, high = parse_cardinality(card)
    values = frozenset(binding) if binding is not None else None

    if not name.endswith("[x]"):
        return [ElementDef(name, type_, low, high, values)]

    prefix = name[:-3]
    return [
        ElementDef(prefix + t[0].upper() + t[1:], t, low, high, values, choice=prefix)
        for t in type_.split("|")
    ]


def _base_elements(base: str) -> List[ElementDef]:
    if base == ELEMENT:
        return el("id", "string") + el("extension", "Extension", "0..*")
    if base == BACKBONE_ELEMENT:
        return _base_elements(ELEMENT) + el("modifierExtension", "Extension", "0..*")
    if base == BASE_RESOURCE:
        return (
            el("id", "id")
            + el("meta", "Meta")
            + el("implicitRules", "uri")
            + el("language", "code")
        )
    if base == DOMAIN_RESOURCE:
        return (
            _base_elements(BASE_RESOURCE)
            + el("text", "Narrative")
            + el("contained", RESOURCE, "0..*")
            + el("extension", "Extension", "0..*")
            + el("modifierExtension", "Extension", "0..*")
        )
    raise ValueError(f"Unknown base {base}")


def define(name: str, *elements: List[ElementDef], base: str = ELEMENT) -> TypeDef:
    merged: Dict[str, ElementDef] = {}
    for element in _base_elements(base):
        merged[element.name] = element
    for group in elements:
        for element in group:
            merged[element.name] = element
    return TypeDef(name=name, base=base, elements=merged)


def open_resource(name: str, base: str = DOMAIN_RESOURCE) -> TypeDef:
    """Definition for a resource the catalogue lists but does not describe."""
    merged = {e.name: e for e in _base_elements(base)}
    return TypeDef(name=name, base=base, elements=merged, open=True)


# ---- shared value sets (required bindings) ----

ADMINISTRATIVE_GENDER = ("male", "female", "other", "unknown")
NARRATIVE_STATUS = ("generated", "extensions", "additional", "empty")
ISSUE_SEVERITY = ("fatal", "error", "warning", "information")
NAME_USE = ("usual", "official", "temp", "nickname", "anonymous", "old", "maiden")
CONTACT_POINT_USE = ("home", "work", "temp", "old", "mobile")
ADDRESS_TYPE = ("postal", "physical", "both")
QUANTITY_COMPARATOR = ("<", "<=", ">=", ">")
BUNDLE_TYPE = (
    "document", "message", "transaction", "transaction-response",
    "batch", "batch-response", "history", "searchset", "collection",
)
SEARCH_ENTRY_MODE = ("match", "include", "outcome")

# Resources that derive from Resource rather than DomainResource
BARE_RESOURCES = frozenset({"Bundle", "Binary", "Parameters"})
