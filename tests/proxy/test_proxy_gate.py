"""
Tests for the validation gate
"""

import json

import pytest

from fhirproxy.core.errors import ClientPayloadError
from fhirproxy.core.fhir import FHIR_MIME_JSON, FHIR_MIME_XML
from fhirproxy.core.proxy import ValidationGate, ValidationOutcome


@pytest.fixture
def gate():
    return ValidationGate()


def issues(outcome):
    assert outcome["resourceType"] == "OperationOutcome"
    return outcome["issue"]


class TestValidationGate:
    def test_valid_json_passes(self, gate, r4_context, patient_json):
        outcome = gate.validate(r4_context, patient_json, FHIR_MIME_JSON)
        assert outcome.passed
        assert outcome.issue is None

    def test_valid_xml_passes(self, gate, r4_context, patient_xml):
        assert gate.validate(r4_context, patient_xml, "application/xml").passed

    def test_parser_follows_declared_content_type(self, gate, r4_context, patient_xml):
        # XML declared as JSON is a syntax error
        outcome = gate.validate(r4_context, patient_xml, FHIR_MIME_JSON)
        assert not outcome.passed

    def test_missing_content_type_means_json(self, gate, r4_context, patient_json):
        assert gate.validate(r4_context, patient_json, None).passed

    def test_malformed_syntax(self, gate, r4_context, fixture_text):
        outcome = gate.validate(r4_context, fixture_text("patient-invalid-syntax.json"), FHIR_MIME_JSON)

        assert not outcome.passed
        (issue,) = issues(outcome.issue)
        assert issue["severity"] == "error"
        assert issue["code"] == "processing"
        assert issue["diagnostics"]

    def test_empty_body(self, gate, r4_context):
        outcome = gate.validate(r4_context, "", FHIR_MIME_XML)
        assert not outcome.passed
        assert issues(outcome.issue)[0]["code"] == "processing"

    def test_semantic_failure_uses_validator_outcome(self, gate, r4_context, fixture_text):
        outcome = gate.validate(r4_context, fixture_text("patient-invalid.json"), FHIR_MIME_JSON)

        assert not outcome.passed
        codes_found = {issue["code"] for issue in issues(outcome.issue)}
        assert {"code-invalid", "value", "structure"} <= codes_found

    def test_unknown_resource_type(self, gate, r4_context):
        outcome = gate.validate(r4_context, json.dumps({"resourceType": "Spaceship"}), FHIR_MIME_JSON)
        assert not outcome.passed
        assert issues(outcome.issue)[0]["code"] == "not-supported"


class TestValidationOutcome:
    def test_passed_does_not_raise(self):
        ValidationOutcome(passed=True).raise_for_failure()

    def test_failure_raises_client_payload_error(self):
        outcome = {"resourceType": "OperationOutcome", "issue": []}
        with pytest.raises(ClientPayloadError) as exc_info:
            ValidationOutcome(passed=False, issue=outcome).raise_for_failure()
        assert exc_info.value.outcome == outcome
        assert exc_info.value.is_client_error


class TestUnreadableBodies:
    """Bodies the parsers cannot read are answered as client errors, never faults."""

    @pytest.mark.parametrize("fixture,content_type", [
        ("huge_integer_json", FHIR_MIME_JSON),
        ("huge_integer_xml", FHIR_MIME_XML),
        ("deeply_nested_json", FHIR_MIME_JSON),
        ("deeply_nested_xml", FHIR_MIME_XML),
    ])
    def test_rejected_with_an_outcome(self, gate, r4_context, request, fixture, content_type):
        body = request.getfixturevalue(fixture)

        outcome = gate.validate(r4_context, body, content_type)

        assert not outcome.passed
        found = issues(outcome.issue)
        assert found
        assert all(issue["severity"] == "error" and issue["diagnostics"] for issue in found)

    def test_bytes_are_decoded_with_declared_charset(self, gate, r4_context):
        body = '{"resourceType":"Patient","name":[{"family":"Müller"}]}'.encode("latin-1")
        assert gate.validate(r4_context, body, "application/json+fhir; charset=ISO-8859-1").passed

    def test_undecodable_bytes_are_malformed_syntax(self, gate, r4_context):
        body = '{"resourceType":"Patient","name":[{"family":"Müller"}]}'.encode("latin-1")

        outcome = gate.validate(r4_context, body, FHIR_MIME_JSON)

        assert not outcome.passed
        (issue,) = issues(outcome.issue)
        assert issue["code"] == "processing"
        assert "utf-8" in issue["diagnostics"]
