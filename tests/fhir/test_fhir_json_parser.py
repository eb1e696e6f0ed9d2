"""
Tests for the FHIR JSON serialization
"""

import json
import sys

import pytest

from fhirproxy.core.errors import DataFormatError, codes


needs_digit_limit = pytest.mark.skipif(
    not hasattr(sys, "get_int_max_str_digits"),
    reason="interpreter has no int/str digit limit",
)


class TestJsonParse:
    @pytest.fixture
    def parser(self, r4_context):
        return r4_context.new_json_parser()

    def test_parses_patient(self, parser, patient_json, patient_resource):
        resource = parser.parse_resource(patient_json)
        assert resource == patient_resource
        assert resource["resourceType"] == "Patient"

    def test_empty_body_is_a_format_error(self, parser):
        with pytest.raises(DataFormatError) as exc_info:
            parser.parse_resource("   ")
        assert exc_info.value.error_code == codes.INVALID_SYNTAX

    def test_malformed_json(self, parser, fixture_text):
        with pytest.raises(DataFormatError) as exc_info:
            parser.parse_resource(fixture_text("patient-invalid-syntax.json"))
        assert exc_info.value.message.startswith("Failed to parse JSON content, error was:")

    def test_array_is_not_a_resource(self, parser):
        with pytest.raises(DataFormatError) as exc_info:
            parser.parse_resource('[{"resourceType": "Patient"}]')
        assert "expected a resource object" in exc_info.value.message

    def test_missing_resource_type(self, parser):
        with pytest.raises(DataFormatError) as exc_info:
            parser.parse_resource('{"id": "x"}')
        assert "resourceType" in exc_info.value.message

    def test_deep_nesting_is_a_format_error(self, parser, deeply_nested_json):
        with pytest.raises(DataFormatError) as exc_info:
            parser.parse_resource(deeply_nested_json)
        assert exc_info.value.error_code == codes.INVALID_SYNTAX
        assert isinstance(exc_info.value.cause, RecursionError)

    @needs_digit_limit
    def test_integer_over_digit_limit_is_a_format_error(self, parser, huge_integer_json):
        with pytest.raises(DataFormatError) as exc_info:
            parser.parse_resource(huge_integer_json)
        assert isinstance(exc_info.value.cause, ValueError)


class TestJsonEncode:
    @pytest.fixture
    def parser(self, r4_context):
        return r4_context.new_json_parser()

    def test_compact_encoding_puts_resource_type_first(self, parser):
        text = parser.encode_resource_to_string({"id": "x", "resourceType": "Patient", "active": True})
        assert text == '{"resourceType":"Patient","id":"x","active":true}'

    def test_pretty_encoding(self, parser, patient_resource):
        text = parser.encode_resource_to_string(patient_resource, pretty=True)
        assert text.startswith('{\n  "resourceType": "Patient",')
        assert json.loads(text) == patient_resource

    def test_non_ascii_is_kept(self, parser):
        text = parser.encode_resource_to_string({"resourceType": "Patient", "name": [{"family": "Müller"}]})
        assert "Müller" in text

    def test_encoding_requires_a_resource(self, parser):
        with pytest.raises(DataFormatError):
            parser.encode_resource_to_string({"id": "x"})

    @needs_digit_limit
    def test_integer_over_digit_limit_cannot_be_encoded(self, parser):
        with pytest.raises(DataFormatError):
            parser.encode_resource_to_string({"resourceType": "Patient", "multipleBirthInteger": 10 ** 5000})
