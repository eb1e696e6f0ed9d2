"""
Mock collaborators for proxy tests
"""

import pytest

from fhirproxy.core.proxy import HeaderMap, UpstreamReply


class RecordingUpstream:
    """Mock upstream that records requests and answers with a fixed reply"""

    def __init__(self, reply=None, error=None):
        self.reply = reply or UpstreamReply(status=200)
        self.error = error
        self.requests = []

    async def forward_request(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


class RecordingResponder:
    def __init__(self):
        self.responses = []
        self.errors = []

    async def respond(self, response):
        self.responses.append(response)

    async def fail(self, error):
        self.errors.append(error)


@pytest.fixture
def make_upstream():
    """Factory: make_upstream(status, body=None, content_type=None, headers=None, error=None, raw_body=None)"""
    def _make(status=200, body=None, content_type=None, headers=None, error=None, raw_body=None):
        header_map = HeaderMap(headers or {})
        if content_type is not None:
            header_map = header_map.with_header("Content-Type", content_type)
        return RecordingUpstream(
            reply=UpstreamReply(status=status, headers=header_map, body=body, raw_body=raw_body),
            error=error,
        )
    return _make


@pytest.fixture
def responder():
    return RecordingResponder()
