"""
Tests for FhirContext and content-type classification
"""

import pytest

from fhirproxy.core.errors import ConfigurationError, codes
from fhirproxy.core.fhir import (
    FHIR_MIME_JSON,
    FHIR_MIME_XML,
    ContentKind,
    FhirContext,
    JsonParser,
    XmlParser,
    classify_content_type,
    is_fhir_content_type,
    response_content_type,
)


class TestFhirContext:
    @pytest.mark.parametrize("tag,version", [("R4", "R4"), ("r4", "R4"), ("dstu2", "DSTU2")])
    def test_for_version(self, tag, version):
        assert FhirContext.for_version(tag).version == version

    @pytest.mark.parametrize("tag", ["DSTU1", "STU3", ""])
    def test_unsupported_version(self, tag):
        with pytest.raises(ConfigurationError) as exc_info:
            FhirContext.for_version(tag)
        assert exc_info.value.error_code == codes.UNSUPPORTED_FHIR_VERSION

    def test_parser_selection(self, r4_context):
        assert isinstance(r4_context.new_parser(FHIR_MIME_XML), XmlParser)
        assert isinstance(r4_context.new_parser(FHIR_MIME_JSON), JsonParser)
        assert isinstance(r4_context.new_parser("json"), JsonParser)
        assert isinstance(r4_context.new_parser("text/xml"), XmlParser)
        assert isinstance(r4_context.new_parser(None), JsonParser)


class TestContentTypes:
    def test_classification(self):
        assert classify_content_type("application/json+fhir") is ContentKind.JSON
        assert classify_content_type("application/fhir+json; charset=UTF-8") is ContentKind.JSON
        assert classify_content_type("application/xml+fhir") is ContentKind.XML
        assert classify_content_type("text/plain") is ContentKind.XML
        assert classify_content_type(None) is ContentKind.JSON

    def test_fhir_like(self):
        assert is_fhir_content_type("application/json")
        assert is_fhir_content_type("application/fhir+xml")
        assert not is_fhir_content_type("text/html")
        assert not is_fhir_content_type(None)

    def test_mime_types(self):
        assert ContentKind.JSON.mime_type == "application/json+fhir"
        assert ContentKind.XML.mime_type == "application/xml+fhir"

    @pytest.mark.parametrize("resolved,expected", [
        ("application/fhir+json", "application/fhir+json"),
        ("application/xml+fhir", "application/xml+fhir"),
        ("json", FHIR_MIME_JSON),
        ("xml", FHIR_MIME_XML),
        ("application/xml, application/json", FHIR_MIME_JSON),
        ("application/*", FHIR_MIME_XML),
    ])
    def test_response_content_type(self, resolved, expected):
        assert response_content_type(resolved) == expected
