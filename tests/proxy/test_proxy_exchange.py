"""
Tests for the exchange data model: HeaderMap and Exchange
"""

import pytest

from fhirproxy.core.errors import DataFormatError
from fhirproxy.core.proxy import Exchange, HeaderMap
from fhirproxy.core.proxy.exchange import content_charset, decode_body


class TestHeaderMap:
    def test_lookup_is_case_insensitive(self):
        headers = HeaderMap({"Content-Type": "application/json"})
        assert headers.get("content-type") == "application/json"
        assert "CONTENT-TYPE" in headers
        assert headers.get("Accept") is None
        assert headers.get("Accept", "*/*") == "*/*"

    def test_preserves_original_spelling(self):
        headers = HeaderMap({"X-OpenHIM-TransactionID": "abc"})
        assert list(headers) == ["X-OpenHIM-TransactionID"]

    def test_iteration_is_ordered_by_lower_cased_name(self):
        headers = HeaderMap([("b-header", "2"), ("Accept", "x"), ("a-header", "1")])
        assert list(headers) == ["a-header", "Accept", "b-header"]

    def test_repeated_names_are_joined(self):
        headers = HeaderMap([("Accept", "a"), ("accept", "b")])
        assert len(headers) == 1
        assert headers.get("Accept") == "a, b"

    def test_with_header_replaces_other_spelling(self):
        original = HeaderMap({"content-type": "text/plain"})
        updated = original.with_header("Content-Type", "application/json+fhir")
        assert updated.to_dict() == {"Content-Type": "application/json+fhir"}
        assert original.to_dict() == {"content-type": "text/plain"}

    def test_without(self):
        headers = HeaderMap({"Host": "h", "Content-Length": "3", "Accept": "x"})
        assert headers.without("host", "CONTENT-LENGTH", "missing").to_dict() == {"Accept": "x"}

    def test_equality_and_hash(self):
        a = HeaderMap({"Accept": "x", "Host": "h"})
        b = HeaderMap([("Host", "h"), ("Accept", "x")])
        assert a == b
        assert hash(a) == hash(b)
        assert HeaderMap(a) == a


class TestExchange:
    def test_normalizes_fields(self):
        exchange = Exchange(
            method="post",
            path="/fhir/Patient",
            params=[("name", "x")],
            headers={"X-OpenHIM-TransactionID": "trx-1", "Content-Type": "application/xml"},
            body="<Patient/>",
        )
        assert exchange.method == "POST"
        assert exchange.params == (("name", "x"),)
        assert isinstance(exchange.headers, HeaderMap)
        assert exchange.carries_body
        assert exchange.transaction_id == "trx-1"
        assert exchange.log_prefix == "[trx-1]"
        assert exchange.content_type == "application/xml"

    def test_missing_transaction_id(self):
        exchange = Exchange(method="GET", path="/")
        assert exchange.transaction_id is None
        assert exchange.log_prefix == "[None]"

    @pytest.mark.parametrize("method,expected", [
        ("POST", True), ("PUT", True), ("GET", False), ("DELETE", False), ("PATCH", False),
    ])
    def test_carries_body(self, method, expected):
        assert Exchange(method=method, path="/").carries_body is expected

    def test_forwarded_params_drop_format_in_any_case(self):
        exchange = Exchange(
            method="GET",
            path="/Patient",
            params=[("_format", "xml"), ("name", "a"), ("_FORMAT", "json"), ("name", "b")],
        )
        assert exchange.forwarded_params() == (("name", "a"), ("name", "b"))

    def test_forwarded_headers_strip_transport_headers(self):
        exchange = Exchange(
            method="POST",
            path="/Patient",
            headers={
                "content-type": "application/json",
                "Content-Length": "10",
                "HOST": "proxy",
                "Authorization": "Bearer t",
            },
        )
        assert exchange.forwarded_headers().to_dict() == {"Authorization": "Bearer t"}

    def test_is_immutable(self):
        exchange = Exchange(method="GET", path="/")
        with pytest.raises(Exception):
            exchange.path = "/other"


class TestRepeatedHeaders:
    def test_values_stay_separate(self):
        headers = HeaderMap([("Set-Cookie", "a=1; Path=/"), ("set-cookie", "b=2")])

        assert headers.get_all("SET-COOKIE") == ["a=1; Path=/", "b=2"]
        assert list(headers.items()) == [("Set-Cookie", "a=1; Path=/"), ("Set-Cookie", "b=2")]

    def test_with_header_replaces_every_value(self):
        headers = HeaderMap([("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")]).with_header("Set-Cookie", "c=3")
        assert headers.get_all("Set-Cookie") == ["c=3"]

    def test_missing_name(self):
        assert HeaderMap().get_all("Set-Cookie") == []


class TestWireBody:
    def test_text_uses_declared_charset(self):
        exchange = Exchange(
            method="POST",
            path="/Patient",
            headers={"Content-Type": 'application/json+fhir; charset="ISO-8859-1"'},
            raw_body="Müller".encode("latin-1"),
        )
        assert exchange.wire_body == "Müller".encode("latin-1")
        assert exchange.text() == "Müller"

    def test_text_defaults_to_utf8(self):
        exchange = Exchange(method="POST", path="/Patient", raw_body="Müller".encode("utf-8"))
        assert exchange.text() == "Müller"

    def test_undecodable_bytes_raise(self):
        exchange = Exchange(method="POST", path="/Patient", raw_body=b"\xff\xfe")
        with pytest.raises(DataFormatError) as exc_info:
            exchange.text()
        assert exc_info.value.details == {"charset": "utf-8"}

    def test_unknown_charset_raises(self):
        with pytest.raises(DataFormatError):
            decode_body(b"{}", "application/json; charset=no-such-codec")

    def test_text_body_without_bytes(self):
        exchange = Exchange(method="POST", path="/Patient", body="{}")
        assert exchange.wire_body == "{}"
        assert exchange.text() == "{}"

    @pytest.mark.parametrize("content_type,expected", [
        ("application/json; charset=UTF-8", "UTF-8"),
        ("application/xml;charset=iso-8859-1", "iso-8859-1"),
        ('text/xml; charset="windows-1252"', "windows-1252"),
        ("application/json", None),
        (None, None),
    ])
    def test_content_charset(self, content_type, expected):
        assert content_charset(content_type) == expected
