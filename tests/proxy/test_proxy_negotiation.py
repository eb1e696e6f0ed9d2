"""
Tests for client content negotiation

Priority: Accept (unless */*) > first _format > Content-Type > JSON default.
"""

import pytest

from fhirproxy.core.fhir import FHIR_MIME_JSON, FHIR_MIME_XML
from fhirproxy.core.proxy import Exchange, HeaderMap, resolve_client_content_type


def resolve(headers=None, params=(), content_type=None):
    return resolve_client_content_type(HeaderMap(headers or {}), params, content_type)


class TestResolveClientContentType:
    def test_accept_wins_and_is_verbatim(self):
        assert resolve(
            {"Accept": "application/fhir+json"},
            [("_format", FHIR_MIME_XML)],
            FHIR_MIME_XML,
        ) == "application/fhir+json"

    def test_accept_header_name_is_case_insensitive(self):
        assert resolve({"accept": FHIR_MIME_XML}) == FHIR_MIME_XML

    def test_wildcard_accept_is_ignored(self):
        assert resolve({"Accept": "*/*"}, [("_format", "xml")]) == "xml"

    def test_first_format_param_wins(self):
        params = [("name", "x"), ("_format", "xml"), ("_format", "json")]
        assert resolve(params=params) == "xml"

    def test_format_param_key_is_case_sensitive(self):
        assert resolve(params=[("_FORMAT", "xml")]) == FHIR_MIME_JSON

    @pytest.mark.parametrize("content_type,expected", [
        ("application/json", FHIR_MIME_JSON),
        ("application/fhir+json; charset=utf-8", FHIR_MIME_JSON),
        ("application/xml+fhir", FHIR_MIME_XML),
        ("text/xml", FHIR_MIME_XML),
        ("text/plain", FHIR_MIME_XML),
    ])
    def test_content_type_is_classified(self, content_type, expected):
        assert resolve(content_type=content_type) == expected

    def test_default_is_json(self):
        assert resolve() == FHIR_MIME_JSON
        assert resolve({"Accept": "*/*"}) == FHIR_MIME_JSON

    def test_pure(self):
        headers = HeaderMap({"Accept": "*/*", "Content-Type": FHIR_MIME_XML})
        params = (("_count", "10"),)
        first = resolve_client_content_type(headers, params, FHIR_MIME_XML)
        assert first == resolve_client_content_type(headers, params, FHIR_MIME_XML) == FHIR_MIME_XML


class TestExchangeClientKind:
    def test_resolved_at_construction(self):
        exchange = Exchange(
            method="get",
            path="/fhir/Patient",
            params=(("_format", FHIR_MIME_XML),),
            headers={"Accept": FHIR_MIME_JSON},
        )
        assert exchange.method == "GET"
        assert exchange.client_kind == FHIR_MIME_JSON

    def test_uses_body_content_type(self):
        exchange = Exchange(method="POST", path="/Patient", headers={"Content-Type": "application/xml"})
        assert exchange.client_kind == FHIR_MIME_XML

    def test_idempotent(self):
        exchange = Exchange(method="GET", path="/Patient", params=(("_format", "xml"),))
        again = resolve_client_content_type(exchange.headers, exchange.params, exchange.content_type)
        assert exchange.client_kind == again == "xml"
