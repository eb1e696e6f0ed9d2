# fhirproxy/core/fhir/xml_parser.py
"""
FHIR XML serialization.

Mapping rules between the XML form and the JSON-shaped resource dict:
- the root element is named by resourceType, in the FHIR namespace
- primitives carry their value in a "value" attribute
- element ids and extension urls are attributes, resource ids are elements
- primitive extensions ("_birthDate" in JSON) become children of the primitive
- contained resources are wrapped in the element that holds them
- narrative div is XHTML, kept as a string in JSON

XML does not say which elements repeat or which JSON type a primitive has,
so reading consults the version's element catalogue. Elements the catalogue
does not describe fall back to structural inference: repeated siblings become
a list and primitive values stay strings.
"""

from __future__ import annotations

import copy
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

from fhirproxy.core.errors import DataFormatError

from .constants import FHIR_NS, XHTML_NS, ContentKind
from .parser import FhirParser, Resource, require_resource
from .structures import ElementDef, TypeDef
from .structures.base import BOOLEAN_TYPES, DECIMAL_TYPES, INTEGER_TYPES


EXTENSION_ELEMENTS = ("extension", "modifierExtension")

_INTEGER_RE = re.compile(r"-?[0-9]+")


def _split(tag: str) -> Tuple[str, str]:
    if tag.startswith("{"):
        ns, _, local = tag[1:].partition("}")
        return ns, local
    return "", tag


def _fhir(name: str) -> str:
    return f"{{{FHIR_NS}}}{name}"


def _localize(elem: ET.Element, parent_ns: str = "") -> None:
    """Replace qualified tags by local names, declaring xmlns where the namespace changes."""
    ns, local = _split(elem.tag)
    elem.tag = local
    if ns and ns != parent_ns:
        elem.set("xmlns", ns)
    for child in elem:
        if isinstance(child.tag, str):
            _localize(child, ns or parent_ns)


def _indent(elem: ET.Element, level: int = 0, space: str = "  ") -> None:
    # Narrative XHTML keeps its own whitespace
    if _split(elem.tag)[0] == XHTML_NS:
        return
    children = list(elem)
    if not children:
        return
    pad = "\n" + space * (level + 1)
    elem.text = pad
    for child in children:
        _indent(child, level + 1, space)
        child.tail = pad
    children[-1].tail = "\n" + space * level


class XmlParser(FhirParser):
    """FHIR XML serialization backed by xml.etree.ElementTree."""

    kind = ContentKind.XML

    # =========================================================
    # Parsing
    # =========================================================

    def parse_resource(self, text: str) -> Resource:
        if text is None or not text.strip():
            raise DataFormatError("Failed to parse XML content, the body is empty")
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise DataFormatError(
                f"Failed to parse XML content, error was: {exc}",
                cause=exc,
            ) from exc
        try:
            return self._read_resource(root)
        except RecursionError as exc:
            raise DataFormatError("Failed to parse XML content, the document is nested too deeply", cause=exc) from exc

    def _read_resource(self, elem: ET.Element) -> Resource:
        ns, name = _split(elem.tag)
        if ns != FHIR_NS:
            raise DataFormatError(
                f"This does not appear to be a FHIR resource (wrong namespace '{ns}') on element '{name}'"
            )
        resource: Resource = {"resourceType": name}
        self._read_children(elem, self.catalogue.resource(name), resource)
        return resource

    def _read_children(self, elem: ET.Element, definition: Optional[TypeDef], target: Dict[str, Any]) -> None:
        groups: Dict[str, List[ET.Element]] = {}
        for child in elem:
            if not isinstance(child.tag, str):
                continue
            ns, local = _split(child.tag)
            if ns not in (FHIR_NS, XHTML_NS):
                raise DataFormatError(f"Unexpected namespace '{ns}' on element '{local}'")
            groups.setdefault(local, []).append(child)

        for name, children in groups.items():
            element_def = definition.get(name) if definition is not None else None
            # Several occurrences of a single-valued element stay a list so the
            # validator can report the cardinality problem.
            repeats = len(children) > 1 or (element_def is not None and element_def.repeats)

            values: List[Any] = []
            extras: List[Optional[Dict[str, Any]]] = []
            for child in children:
                value, extra = self._read_element(child, element_def)
                values.append(value)
                extras.append(extra)

            if repeats:
                if any(v is not None for v in values):
                    target[name] = values
                if any(e is not None for e in extras):
                    target["_" + name] = extras
            else:
                if values[0] is not None:
                    target[name] = values[0]
                if extras[0] is not None:
                    target["_" + name] = extras[0]

    def _read_element(self, child: ET.Element, element_def: Optional[ElementDef]) -> Tuple[Any, Optional[Dict[str, Any]]]:
        ns, local = _split(child.tag)

        if ns == XHTML_NS or (element_def is not None and element_def.is_xhtml):
            return self._xhtml_to_string(child), None

        if (element_def is not None and element_def.is_resource) or (
            element_def is None and self._wraps_resource(child)
        ):
            inner = [c for c in child if isinstance(c.tag, str)]
            if len(inner) != 1:
                raise DataFormatError(f"Element '{local}' must contain exactly one resource")
            return self._read_resource(inner[0]), None

        if (element_def is not None and element_def.is_primitive) or (
            element_def is None and "value" in child.attrib
        ):
            type_name = element_def.type if element_def is not None else None
            value = self._primitive(child.get("value"), type_name, local)
            return value, self._primitive_extras(child)

        type_def = self.catalogue.definition(element_def.type) if element_def is not None else None
        return self._read_complex(child, type_def), None

    def _wraps_resource(self, child: ET.Element) -> bool:
        inner = [c for c in child if isinstance(c.tag, str)]
        if len(inner) != 1 or child.attrib:
            return False
        return self.catalogue.is_resource_name(_split(inner[0].tag)[1])

    def _read_complex(self, elem: ET.Element, type_def: Optional[TypeDef]) -> Dict[str, Any]:
        obj: Dict[str, Any] = {}
        if elem.get("id") is not None:
            obj["id"] = elem.get("id")
        if elem.get("url") is not None:
            obj["url"] = elem.get("url")
        self._read_children(elem, type_def, obj)
        return obj

    def _primitive_extras(self, elem: ET.Element) -> Optional[Dict[str, Any]]:
        extra: Dict[str, Any] = {}
        if elem.get("id") is not None:
            extra["id"] = elem.get("id")
        extension_def = self.catalogue.definition("Extension")
        for sub in elem:
            if isinstance(sub.tag, str) and _split(sub.tag)[1] == "extension":
                extra.setdefault("extension", []).append(self._read_complex(sub, extension_def))
        return extra or None

    def _primitive(self, raw: Optional[str], type_name: Optional[str], name: str) -> Any:
        if raw is None or type_name is None:
            return raw
        if type_name in BOOLEAN_TYPES:
            if raw == "true":
                return True
            if raw == "false":
                return False
            raise DataFormatError(f"Invalid boolean value '{raw}' for element '{name}'")
        if type_name in INTEGER_TYPES:
            if not _INTEGER_RE.fullmatch(raw.strip()):
                raise DataFormatError(f"Invalid integer value '{raw}' for element '{name}'")
            try:
                return int(raw)
            except ValueError as exc:
                raise DataFormatError(f"Invalid integer value for element '{name}': {exc}", cause=exc) from exc
        if type_name in DECIMAL_TYPES:
            try:
                return int(raw) if _INTEGER_RE.fullmatch(raw.strip()) else float(raw)
            except ValueError as exc:
                raise DataFormatError(f"Invalid decimal value '{raw}' for element '{name}'", cause=exc) from exc
        return raw

    def _xhtml_to_string(self, elem: ET.Element) -> str:
        div = copy.deepcopy(elem)
        div.tail = None
        for node in div.iter():
            if not isinstance(node.tag, str):
                continue
            ns, local = _split(node.tag)
            if ns in ("", FHIR_NS):
                node.tag = f"{{{XHTML_NS}}}{local}"
        _localize(div)
        return ET.tostring(div, encoding="unicode")

    # =========================================================
    # Encoding
    # =========================================================

    def encode_resource_to_string(self, resource: Resource, pretty: bool = False) -> str:
        try:
            root = self._write_resource(resource)
            if pretty:
                _indent(root)
            _localize(root)
            return ET.tostring(root, encoding="unicode")
        except (ValueError, RecursionError) as exc:
            raise DataFormatError(f"Failed to encode resource as XML: {exc}", cause=exc) from exc

    def _write_resource(self, resource: Resource) -> ET.Element:
        require_resource(resource, kind=self.kind)
        root = ET.Element(_fhir(resource["resourceType"]))
        self._write_children(root, resource, is_resource=True, is_extension=False)
        return root

    def _write_children(self, parent: ET.Element, obj: Dict[str, Any], *, is_resource: bool, is_extension: bool) -> None:
        for key, value in obj.items():
            if key == "resourceType":
                continue
            if not is_resource and key == "id":
                continue
            if is_extension and key == "url":
                continue
            if key.startswith("_"):
                base = key[1:]
                if base not in obj:
                    self._write_extension_only(parent, base, value)
                continue

            companion = obj.get("_" + key)
            if isinstance(value, list):
                for index, item in enumerate(value):
                    extra = None
                    if isinstance(companion, list) and index < len(companion):
                        extra = companion[index]
                    self._write_value(parent, key, item, extra)
            else:
                self._write_value(parent, key, value, companion if isinstance(companion, dict) else None)

    def _write_extension_only(self, parent: ET.Element, name: str, companion: Any) -> None:
        items = companion if isinstance(companion, list) else [companion]
        for extra in items:
            if extra is not None:
                self._write_value(parent, name, None, extra)

    def _write_value(self, parent: ET.Element, name: str, value: Any, extra: Optional[Dict[str, Any]]) -> None:
        if name == "div" and isinstance(value, str):
            parent.append(self._parse_xhtml(value))
            return

        if isinstance(value, dict):
            if "resourceType" in value:
                wrapper = ET.SubElement(parent, _fhir(name))
                wrapper.append(self._write_resource(value))
                return
            child = ET.SubElement(parent, _fhir(name))
            if value.get("id") is not None:
                child.set("id", str(value["id"]))
            is_extension = name in EXTENSION_ELEMENTS
            if is_extension and value.get("url") is not None:
                child.set("url", str(value["url"]))
            self._write_children(child, value, is_resource=False, is_extension=is_extension)
            return

        if isinstance(value, list):
            raise DataFormatError(f"Element '{name}' contains a nested array")

        if value is None and not extra:
            return

        child = ET.SubElement(parent, _fhir(name))
        if value is not None:
            child.set("value", self._format_primitive(value, name))
        if extra:
            if extra.get("id") is not None:
                child.set("id", str(extra["id"]))
            for extension in extra.get("extension") or []:
                self._write_value(child, "extension", extension, None)

    def _format_primitive(self, value: Any, name: str) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float, str)):
            return str(value)
        raise DataFormatError(f"Element '{name}' has an unsupported value type {type(value).__name__}")

    def _parse_xhtml(self, text: str) -> ET.Element:
        try:
            div = ET.fromstring(text)
        except ET.ParseError as exc:
            raise DataFormatError(f"Invalid XHTML narrative: {exc}", cause=exc) from exc
        for node in div.iter():
            if isinstance(node.tag, str) and not node.tag.startswith("{"):
                node.tag = f"{{{XHTML_NS}}}{node.tag}"
        return div
