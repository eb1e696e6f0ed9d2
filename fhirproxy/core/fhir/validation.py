# fhirproxy/core/fhir/validation.py
"""
Structural validation of resources against the element catalogue.

Checks:
- resourceType is a resource of the configured FHIR version
- no unknown elements (open definitions excepted)
- cardinality: arrays vs single values, required elements
- primitive JSON types and lexical formats (id, date, dateTime, instant, ...)
- required code bindings
- at most one element per choice group (value[x], deceased[x], ...)
- primitive extension companions ("_name") are well formed
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .outcome import ValidationIssue, new_operation_outcome
from .parser import Resource
from .structures import ElementDef, StructureCatalogue, TypeDef
from .structures.base import BOOLEAN_TYPES, DECIMAL_TYPES, INTEGER_TYPES


_YEAR = r"([0-9]([0-9]([0-9][1-9]|[1-9]0)|[1-9]00)|[1-9]000)"
_MONTH = r"(0[1-9]|1[0-2])"
_DAY = r"(0[1-9]|[1-2][0-9]|3[0-1])"
_TIME = r"([01][0-9]|2[0-3]):[0-5][0-9]:([0-5][0-9]|60)(\.[0-9]+)?"
_ZONE = r"(Z|(\+|-)((0[0-9]|1[0-3]):[0-5][0-9]|14:00))"

FORMATS: Dict[str, "re.Pattern[str]"] = {
    "id": re.compile(r"[A-Za-z0-9\-\.]{1,64}"),
    "code": re.compile(r"[^\s]+(\s[^\s]+)*"),
    "uri": re.compile(r"\S*"),
    "url": re.compile(r"\S*"),
    "canonical": re.compile(r"\S*"),
    "oid": re.compile(r"urn:oid:[0-2](\.(0|[1-9][0-9]*))+"),
    "uuid": re.compile(r"urn:uuid:[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"),
    "date": re.compile(rf"{_YEAR}(-{_MONTH}(-{_DAY})?)?"),
    "dateTime": re.compile(rf"{_YEAR}(-{_MONTH}(-{_DAY}(T{_TIME}{_ZONE})?)?)?"),
    "instant": re.compile(rf"{_YEAR}-{_MONTH}-{_DAY}T{_TIME}{_ZONE}"),
    "time": re.compile(_TIME),
    "base64Binary": re.compile(r"(\s*([0-9a-zA-Z\+/=]){4}\s*)+"),
}

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1

_EXTENSION = ElementDef("extension", "Extension", 0, "*")


@dataclass
class ValidationResult:
    version: str
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_successful(self) -> bool:
        return not any(issue.is_blocking for issue in self.issues)

    def to_operation_outcome(self) -> Dict[str, Any]:
        return new_operation_outcome(self.issues, self.version)


class FhirValidator:
    """Validates resource dicts for one FHIR version."""

    def __init__(self, catalogue: StructureCatalogue):
        self.catalogue = catalogue

    def validate_with_result(self, resource: Resource) -> ValidationResult:
        result = ValidationResult(version=self.catalogue.version)
        try:
            self._check_resource(resource, None, result.issues)
        except RecursionError:
            result.issues.append(ValidationIssue(
                code="too-costly",
                diagnostics="Resource is nested too deeply to be validated",
                location=str(resource.get("resourceType")),
            ))
        return result

    # ---- resources ----

    def _check_resource(self, resource: Resource, path: Optional[str], issues: List[ValidationIssue]) -> None:
        resource_type = resource.get("resourceType")
        location = path or str(resource_type)
        definition = self.catalogue.resource(resource_type) if isinstance(resource_type, str) else None
        if definition is None:
            issues.append(ValidationIssue(
                code="not-supported",
                diagnostics=f"Unknown resource type '{resource_type}' for FHIR {self.catalogue.version}",
                location=location,
            ))
            return
        self._check_object(resource, definition, location, issues, skip=("resourceType",))

    # ---- complex values ----

    def _check_object(
        self,
        obj: Dict[str, Any],
        definition: TypeDef,
        path: str,
        issues: List[ValidationIssue],
        skip: tuple = (),
    ) -> None:
        for key, value in obj.items():
            if key in skip:
                continue

            if key.startswith("_"):
                element = definition.get(key[1:])
                if element is None and definition.open:
                    continue
                if element is None or not element.is_primitive:
                    issues.append(ValidationIssue(
                        code="structure",
                        diagnostics=f"Unrecognized element '{key}'",
                        location=f"{path}.{key}",
                    ))
                    continue
                self._check_companion(value, element, f"{path}.{key}", issues)
                continue

            element = definition.get(key)
            if element is None:
                if not definition.open:
                    issues.append(ValidationIssue(
                        code="structure",
                        diagnostics=f"Unrecognized element '{key}'",
                        location=f"{path}.{key}",
                    ))
                continue
            self._check_element(value, element, f"{path}.{key}", obj.get("_" + key), issues)

        for element in definition.required():
            if element.name not in obj and "_" + element.name not in obj:
                issues.append(ValidationIssue(
                    code="required",
                    diagnostics=f"Element '{path}.{element.name}' is required (minimum cardinality {element.min})",
                    location=f"{path}.{element.name}",
                ))

        for group, names in definition.choice_groups().items():
            present = [name for name in names if name in obj]
            if len(present) > 1:
                issues.append(ValidationIssue(
                    code="structure",
                    diagnostics=f"Only one of {', '.join(present)} may be present",
                    location=f"{path}.{group}[x]",
                ))

    def _check_element(
        self,
        value: Any,
        element: ElementDef,
        path: str,
        companion: Any,
        issues: List[ValidationIssue],
    ) -> None:
        if element.repeats:
            if not isinstance(value, list):
                issues.append(ValidationIssue(
                    code="structure",
                    diagnostics=f"Element '{path}' must be an array",
                    location=path,
                ))
                values = [value]
            else:
                if not value:
                    issues.append(ValidationIssue(
                        code="structure",
                        diagnostics=f"Element '{path}' must not be an empty array",
                        location=path,
                    ))
                values = value
        else:
            if isinstance(value, list):
                issues.append(ValidationIssue(
                    code="structure",
                    diagnostics=f"Element '{path}' must not repeat (maximum cardinality 1)",
                    location=path,
                ))
                values = value
            else:
                values = [value]

        indexed = isinstance(value, list)
        for index, item in enumerate(values):
            item_path = f"{path}[{index}]" if indexed else path
            if item is None:
                if element.is_primitive and self._has_companion(companion, index if indexed else None):
                    continue
                issues.append(ValidationIssue(
                    code="value",
                    diagnostics=f"Element '{item_path}' must not be null",
                    location=item_path,
                ))
                continue
            self._check_value(item, element, item_path, issues)

    def _check_value(self, item: Any, element: ElementDef, path: str, issues: List[ValidationIssue]) -> None:
        if element.is_resource:
            if not isinstance(item, dict) or "resourceType" not in item:
                issues.append(ValidationIssue(
                    code="structure",
                    diagnostics=f"Element '{path}' must contain a resource",
                    location=path,
                ))
                return
            self._check_resource(item, path, issues)
            return

        if element.is_xhtml:
            if not isinstance(item, str) or not item.lstrip().startswith("<div"):
                issues.append(ValidationIssue(
                    code="value",
                    diagnostics=f"Element '{path}' must be an XHTML <div> fragment",
                    location=path,
                ))
            return

        if element.is_primitive:
            self._check_primitive(item, element, path, issues)
            return

        if not isinstance(item, dict):
            issues.append(ValidationIssue(
                code="structure",
                diagnostics=f"Element '{path}' must be an object of type {element.type}",
                location=path,
            ))
            return
        type_def = self.catalogue.definition(element.type)
        if type_def is not None:
            self._check_object(item, type_def, path, issues)

    # ---- primitives ----

    def _check_primitive(self, item: Any, element: ElementDef, path: str, issues: List[ValidationIssue]) -> None:
        type_name = element.type
        problem = None

        if type_name in BOOLEAN_TYPES:
            if not isinstance(item, bool):
                problem = f"Element '{path}' must be a JSON boolean"
        elif type_name in INTEGER_TYPES:
            if not isinstance(item, int) or isinstance(item, bool):
                problem = f"Element '{path}' must be a JSON integer"
            elif not _INT32_MIN <= item <= _INT32_MAX:
                problem = f"Element '{path}' is out of range for a 32-bit integer"
            elif type_name == "positiveInt" and item < 1:
                problem = f"Element '{path}' must be a positive integer"
            elif type_name == "unsignedInt" and item < 0:
                problem = f"Element '{path}' must not be negative"
        elif type_name in DECIMAL_TYPES:
            if not isinstance(item, (int, float)) or isinstance(item, bool):
                problem = f"Element '{path}' must be a JSON number"
        else:
            if not isinstance(item, str):
                problem = f"Element '{path}' must be a JSON string"
            elif not item:
                problem = f"Element '{path}' must not be empty"
            else:
                pattern = FORMATS.get(type_name)
                if pattern is not None and not pattern.fullmatch(item):
                    problem = f"Value '{item}' is not a valid {type_name} for element '{path}'"

        if problem is not None:
            issues.append(ValidationIssue(code="value", diagnostics=problem, location=path))
            return

        if element.binding is not None and item not in element.binding:
            allowed = ", ".join(sorted(element.binding))
            issues.append(ValidationIssue(
                code="code-invalid",
                diagnostics=f"Value '{item}' is not valid for element '{path}', expected one of: {allowed}",
                location=path,
            ))

    def _has_companion(self, companion: Any, index: Optional[int]) -> bool:
        if index is None:
            return isinstance(companion, dict)
        return isinstance(companion, list) and index < len(companion) and isinstance(companion[index], dict)

    def _check_companion(self, value: Any, element: ElementDef, path: str, issues: List[ValidationIssue]) -> None:
        entries = value if isinstance(value, list) else [value]
        if element.repeats != isinstance(value, list):
            issues.append(ValidationIssue(
                code="structure",
                diagnostics=f"Element '{path}' must {'be' if element.repeats else 'not be'} an array",
                location=path,
            ))
        extension_def = self.catalogue.definition("Extension")
        for index, entry in enumerate(entries):
            entry_path = f"{path}[{index}]" if isinstance(value, list) else path
            if entry is None:
                continue
            if not isinstance(entry, dict):
                issues.append(ValidationIssue(
                    code="structure",
                    diagnostics=f"Element '{entry_path}' must be an object",
                    location=entry_path,
                ))
                continue
            for key, item in entry.items():
                if key == "id":
                    if not isinstance(item, str):
                        issues.append(ValidationIssue(
                            code="value",
                            diagnostics=f"Element '{entry_path}.id' must be a JSON string",
                            location=f"{entry_path}.id",
                        ))
                elif key == "extension" and extension_def is not None:
                    self._check_element(item, _EXTENSION, f"{entry_path}.extension", None, issues)
                else:
                    issues.append(ValidationIssue(
                        code="structure",
                        diagnostics=f"Unrecognized element '{key}'",
                        location=f"{entry_path}.{key}",
                    ))
