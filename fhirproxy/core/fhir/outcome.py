# fhirproxy/core/fhir/outcome.py
"""
OperationOutcome construction.

Issues are carried as ValidationIssue models and rendered in the shape of
the target FHIR version: DSTU2 points at elements through "location", R4
through "expression".
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IssueSeverity(str, Enum):
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


class ValidationIssue(BaseModel):
    """
    One problem found in a resource.

    code is a FHIR IssueType code (structure, required, value, code-invalid,
    processing, ...).
    """
    model_config = ConfigDict(frozen=True)

    severity: IssueSeverity = Field(default=IssueSeverity.ERROR, description="Issue severity")
    code: str = Field(description="FHIR IssueType code")
    diagnostics: str = Field(description="Human-readable description of the problem")
    location: Optional[str] = Field(default=None, description="Path of the offending element, e.g. Patient.name[0].given")

    @property
    def is_blocking(self) -> bool:
        return self.severity in (IssueSeverity.FATAL, IssueSeverity.ERROR)


def _issue_to_dict(issue: ValidationIssue, version: str) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "severity": issue.severity.value,
        "code": issue.code,
        "diagnostics": issue.diagnostics,
    }
    if issue.location:
        if version == "DSTU2":
            entry["location"] = [issue.location]
        else:
            entry["expression"] = [issue.location]
    return entry


def new_operation_outcome(issues: Iterable[ValidationIssue], version: str) -> Dict[str, Any]:
    """Build an OperationOutcome resource (dict) holding issues."""
    entries: List[Dict[str, Any]] = [_issue_to_dict(issue, version) for issue in issues]
    if not entries:
        entries.append({"severity": "information", "code": "informational", "diagnostics": "All OK"})
    return {"resourceType": "OperationOutcome", "issue": entries}


def outcome_from_exception(exc: BaseException, version: str) -> Dict[str, Any]:
    """OperationOutcome with a single error issue describing exc."""
    message = getattr(exc, "message", None) or str(exc)
    issue = ValidationIssue(code="processing", diagnostics=message)
    return new_operation_outcome([issue], version)
