"""
Tests for the conversion pipeline
"""

import json

import pytest

from fhirproxy.core.errors import DataFormatError, UnsupportedFormat, codes
from fhirproxy.core.fhir import ContentKind
from fhirproxy.core.proxy import ContentPayload, ConversionPipeline


@pytest.fixture
def pipeline():
    return ConversionPipeline()


class TestConversionPipeline:
    def test_json_to_xml(self, pipeline, r4_context, patient_json):
        result = pipeline.convert(r4_context, ContentPayload(ContentKind.JSON, patient_json), ContentKind.XML)

        assert result.kind is ContentKind.XML
        assert result.text.startswith('<Patient xmlns="http://hl7.org/fhir">')
        assert '<gender value="male"' in result.text

    def test_xml_to_json(self, pipeline, r4_context, patient_xml, patient_resource):
        result = pipeline.convert(r4_context, ContentPayload(ContentKind.XML, patient_xml), ContentKind.JSON)

        assert result.kind is ContentKind.JSON
        assert json.loads(result.text) == patient_resource

    def test_there_and_back_is_stable(self, pipeline, r4_context, patient_json, patient_resource):
        xml = pipeline.convert(r4_context, ContentPayload(ContentKind.JSON, patient_json), ContentKind.XML)
        back = pipeline.convert(r4_context, xml, ContentKind.JSON)
        assert json.loads(back.text) == patient_resource

    def test_pretty_output(self, r4_context, patient_xml):
        pretty = ConversionPipeline().convert(r4_context, ContentPayload(ContentKind.XML, patient_xml), "json")
        compact = ConversionPipeline(pretty=False).convert(
            r4_context, ContentPayload(ContentKind.XML, patient_xml), "json"
        )
        assert "\n" in pretty.text
        assert "\n" not in compact.text
        assert json.loads(pretty.text) == json.loads(compact.text)

    def test_unsupported_target(self, pipeline, r4_context, patient_json):
        with pytest.raises(UnsupportedFormat) as exc_info:
            pipeline.convert(r4_context, ContentPayload(ContentKind.JSON, patient_json), "turtle")
        assert exc_info.value.error_code == codes.UNSUPPORTED_FORMAT

    def test_malformed_input_propagates(self, pipeline, r4_context):
        with pytest.raises(DataFormatError):
            pipeline.convert(r4_context, ContentPayload(ContentKind.JSON, "{not json"), ContentKind.XML)
