"""
Tests for the httpx upstream client (httpx.MockTransport, no network)
"""

import httpx
import pytest

from fhirproxy.core.errors import UpstreamError, codes
from fhirproxy.core.fhir import FHIR_MIME_JSON, FHIR_MIME_XML
from fhirproxy.core.proxy import HeaderMap, HttpxUpstreamClient, UpstreamRequest

pytestmark = pytest.mark.anyio


def make_request(**changes):
    values = dict(
        method="POST",
        scheme="http",
        host="fhir.example",
        port=3447,
        path="/fhir/Patient",
        headers=HeaderMap({"Accept": FHIR_MIME_XML, "Content-Type": FHIR_MIME_XML, "X-OpenHIM-TransactionID": "t1"}),
        params=(("name", "a"), ("name", "b")),
        body="<Patient xmlns=\"http://hl7.org/fhir\"/>",
    )
    values.update(changes)
    return UpstreamRequest(**values)


class TestHttpxUpstreamClient:
    async def test_forwards_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                201,
                headers={"Content-Type": FHIR_MIME_XML, "ETag": 'W/"1"', "Connection": "keep-alive"},
                content=b"<Patient xmlns=\"http://hl7.org/fhir\"><id value=\"1\"/></Patient>",
            )

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        reply = await client.forward_request(make_request())
        await client.aclose()

        (sent,) = seen
        assert sent.method == "POST"
        assert sent.url.host == "fhir.example"
        assert sent.url.port == 3447
        assert sent.url.path == "/fhir/Patient"
        assert sent.url.params.get_list("name") == ["a", "b"]
        assert sent.headers["Accept"] == FHIR_MIME_XML
        assert sent.headers["X-OpenHIM-TransactionID"] == "t1"
        assert sent.content == b"<Patient xmlns=\"http://hl7.org/fhir\"/>"

        assert reply.status == 201
        assert reply.content_type == FHIR_MIME_XML
        assert reply.headers.get("ETag") == 'W/"1"'
        assert reply.body.startswith("<Patient")

    async def test_hop_by_hop_headers_are_dropped(self):
        def handler(request):
            return httpx.Response(
                200,
                headers={"Content-Type": FHIR_MIME_JSON, "Connection": "close", "Keep-Alive": "timeout=5"},
                content=b"{}",
            )

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        reply = await client.forward_request(make_request(method="GET", body=None))

        assert "Connection" not in reply.headers
        assert "Keep-Alive" not in reply.headers
        assert "Content-Length" not in reply.headers
        assert reply.content_type == FHIR_MIME_JSON

    async def test_empty_reply_has_no_body(self):
        client = HttpxUpstreamClient(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
        reply = await client.forward_request(make_request(method="DELETE", body=None))

        assert reply.status == 204
        assert reply.body is None

    async def test_bodyless_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        await client.forward_request(make_request(method="GET", body=None, params=()))

        assert seen[0].content == b""
        assert seen[0].url.path == "/fhir/Patient"
        assert not seen[0].url.params

    async def test_transport_failure_becomes_upstream_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamError) as exc_info:
            await client.forward_request(make_request())

        error = exc_info.value
        assert error.error_code == codes.UPSTREAM_UNAVAILABLE
        assert error.details == {"url": "http://fhir.example:3447/fhir/Patient", "method": "POST"}
        assert isinstance(error.cause, httpx.ConnectError)

    async def test_aclose_is_idempotent(self):
        client = HttpxUpstreamClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        await client.forward_request(make_request(method="GET", body=None))
        await client.aclose()
        await client.aclose()


class TestReplyBytes:
    async def test_reply_keeps_wire_bytes_and_decoded_text(self):
        raw = '{"resourceType":"Patient","name":[{"family":"Müller"}]}'.encode("latin-1")

        def handler(request):
            return httpx.Response(200, headers={"Content-Type": "application/json+fhir; charset=ISO-8859-1"}, content=raw)

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        reply = await client.forward_request(make_request(method="GET", body=None))

        assert reply.raw_body == raw
        assert "Müller" in reply.body

    async def test_bytes_body_is_sent_unchanged(self):
        seen = []
        raw = "<Patient xmlns=\"http://hl7.org/fhir\"><name><family value=\"Müller\"/></name></Patient>".encode("latin-1")

        def handler(request):
            seen.append(request)
            return httpx.Response(201)

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        await client.forward_request(make_request(body=raw))

        assert seen[0].content == raw

    async def test_repeated_headers_are_kept_apart(self):
        def handler(request):
            return httpx.Response(200, headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")])

        client = HttpxUpstreamClient(transport=httpx.MockTransport(handler))
        reply = await client.forward_request(make_request(method="GET", body=None))

        assert reply.headers.get_all("Set-Cookie") == ["a=1", "b=2"]
