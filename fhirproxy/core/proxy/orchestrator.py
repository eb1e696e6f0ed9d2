# fhirproxy/core/proxy/orchestrator.py
"""
Per-exchange state machine

    AwaitingContext -> ProcessingRequest -> AwaitingUpstream -> Responded
    ProcessingRequest -> Responded (400 from the validation gate)
    any state -> Errored (internal fault)

States are immutable values. Handler functions take the current state and
the reply that arrived and return the next state; ProxyOrchestrator drives
them for one exchange, awaiting the context and the upstream call in between.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from fhirproxy.config.settings import ProxySettings
from fhirproxy.core.errors import ClientPayloadError, ConversionFault, DataFormatError
from fhirproxy.core.fhir.constants import (
    ContentKind,
    classify_content_type,
    is_fhir_content_type,
    response_content_type,
)
from fhirproxy.core.fhir.context import FhirContext

from .context_provider import ContextProvider
from .conversion import ConversionPipeline
from .exchange import STRIPPED_HEADERS, Body, ContentPayload, Exchange, HeaderMap, content_charset
from .gate import ValidationGate
from .interfaces import FinalResponse, Responder, UpstreamClient, UpstreamReply, UpstreamRequest
from .policy import UpstreamFormatMode, response_kind, target_kind


logger = logging.getLogger(__name__)

BAD_REQUEST = 400


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AwaitingContext:
    exchange: Exchange
    settings: ProxySettings
    mode: UpstreamFormatMode


@dataclass(frozen=True)
class ProcessingRequest:
    exchange: Exchange
    settings: ProxySettings
    mode: UpstreamFormatMode
    context: FhirContext


@dataclass(frozen=True)
class AwaitingUpstream:
    exchange: Exchange
    settings: ProxySettings
    mode: UpstreamFormatMode
    context: FhirContext
    request: UpstreamRequest


@dataclass(frozen=True)
class Responded:
    exchange: Exchange
    response: FinalResponse


@dataclass(frozen=True)
class Errored:
    exchange: Exchange
    error: BaseException


TerminalState = Union[Responded, Errored]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def start(exchange: Exchange, settings: ProxySettings) -> AwaitingContext:
    """Inbound exchange. Raises ConfigurationError for an unknown upstream format."""
    mode = UpstreamFormatMode.parse(settings.upstream_format)
    return AwaitingContext(exchange=exchange, settings=settings, mode=mode)


def on_context_ready(state: AwaitingContext, context: FhirContext) -> ProcessingRequest:
    return ProcessingRequest(
        exchange=state.exchange,
        settings=state.settings,
        mode=state.mode,
        context=context,
    )


def process_client_request(
    state: ProcessingRequest,
    gate: ValidationGate,
    conversion: ConversionPipeline,
) -> Union[AwaitingUpstream, Responded]:
    """
    Validate (POST/PUT with validation enabled), convert and build the
    upstream request, or answer 400 when the body is rejected.
    """
    exchange = state.exchange
    headers = exchange.forwarded_headers()
    body: Optional[Body] = None

    if exchange.carries_body:
        if state.settings.validation_enabled:
            outcome = gate.validate(state.context, exchange.wire_body, exchange.content_type)
            try:
                outcome.raise_for_failure()
            except ClientPayloadError as exc:
                logger.info("%s Request body rejected, responding with 400", exchange.log_prefix)
                return Responded(exchange=exchange, response=bad_request(state.context, exchange, exc.outcome))

        kind, body = _request_body(state, conversion)
        headers = headers.with_header("Content-Type", _outbound_content_type(kind, body, exchange))

    client_kind = classify_content_type(exchange.client_kind)
    headers = headers.with_header("Accept", target_kind(state.mode, client_kind).target.mime_type)

    settings = state.settings
    request = UpstreamRequest(
        method=exchange.method,
        scheme=settings.upstream_scheme,
        host=settings.upstream_host,
        port=settings.upstream_port,
        path=exchange.path,
        headers=headers,
        params=exchange.forwarded_params(),
        body=body,
    )
    logger.info(
        "%s Forwarding to %s:%s%s",
        exchange.log_prefix, request.host, request.port, request.path,
    )
    return AwaitingUpstream(
        exchange=exchange,
        settings=state.settings,
        mode=state.mode,
        context=state.context,
        request=request,
    )


def on_upstream_reply(
    state: AwaitingUpstream,
    reply: UpstreamReply,
    conversion: ConversionPipeline,
) -> Responded:
    exchange = state.exchange
    logger.info("%s Processing upstream response and responding to client", exchange.log_prefix)

    headers = reply.headers.without(*STRIPPED_HEADERS)
    payload = reply_payload(reply)

    if state.mode is UpstreamFormatMode.CLIENT_MIRROR or payload is None:
        return Responded(exchange=exchange, response=_pass_through(reply, headers))

    client_kind = classify_content_type(exchange.client_kind)
    decision = response_kind(state.mode, payload.kind, client_kind)
    if not decision.needs_conversion:
        return Responded(exchange=exchange, response=_pass_through(reply, headers))

    logger.info("%s Converting response body to %s", exchange.log_prefix, decision.target.mime_type)
    try:
        converted = conversion.convert(state.context, payload, decision.target)
    except DataFormatError as exc:
        raise ConversionFault.wrap(exc, direction="response") from exc

    return Responded(
        exchange=exchange,
        response=FinalResponse(
            status=reply.status,
            headers=headers.with_header("Content-Type", response_content_type(exchange.client_kind)),
            body=converted.text,
        ),
    )


def fail(exchange: Exchange, error: BaseException) -> Errored:
    logger.warning("%s Exchange failed: %s", exchange.log_prefix, error)
    return Errored(exchange=exchange, error=error)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _request_body(state: ProcessingRequest, conversion: ConversionPipeline) -> Tuple[ContentKind, Optional[Body]]:
    """Target kind and the body to forward: converted text, or the body as received."""
    exchange = state.exchange
    wire = exchange.wire_body
    source_kind = classify_content_type(exchange.content_type)
    decision = target_kind(state.mode, source_kind)

    # A blank body has nothing to convert
    if not decision.needs_conversion or wire is None or not wire.strip():
        return decision.target, wire

    logger.info("%s Converting request body to %s", exchange.log_prefix, decision.target.mime_type)
    try:
        source = ContentPayload(kind=source_kind, text=exchange.text() or "")
        converted = conversion.convert(state.context, source, decision.target)
    except DataFormatError as exc:
        raise ConversionFault.wrap(exc, direction="request") from exc
    return converted.kind, converted.text


def _outbound_content_type(kind: ContentKind, body: Optional[Body], exchange: Exchange) -> str:
    """Canonical MIME of kind; bytes relayed as received keep their declared charset."""
    charset = content_charset(exchange.content_type)
    if isinstance(body, bytes) and charset is not None:
        return f"{kind.mime_type}; charset={charset}"
    return kind.mime_type


def reply_payload(reply: UpstreamReply) -> Optional[ContentPayload]:
    """Body of the reply as a payload, or None if it is absent, blank or not FHIR-like."""
    body = reply.body
    if body is None or not body.strip():
        return None
    content_type = reply.content_type
    if not is_fhir_content_type(content_type):
        return None
    return ContentPayload(kind=classify_content_type(content_type), text=body)


def _pass_through(reply: UpstreamReply, headers: HeaderMap) -> FinalResponse:
    if reply.content_type is not None:
        headers = headers.with_header("Content-Type", reply.content_type)
    body = reply.raw_body if reply.raw_body is not None else reply.body
    return FinalResponse(status=reply.status, headers=headers, body=body)


def bad_request(context: FhirContext, exchange: Exchange, outcome: Dict[str, Any]) -> FinalResponse:
    """400 carrying outcome, encoded in the client's resolved kind."""
    parser = context.new_parser(exchange.client_kind)
    body = parser.encode_resource_to_string(outcome)
    headers = HeaderMap({"Content-Type": response_content_type(exchange.client_kind)})
    return FinalResponse(status=BAD_REQUEST, headers=headers, body=body)


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

class ProxyOrchestrator:
    """
    Drives one exchange through the state machine.

    Holds the settings snapshot taken when the exchange arrived and shared
    collaborators only; an instance must not be reused for another exchange.
    """

    def __init__(
        self,
        *,
        settings: ProxySettings,
        context_provider: ContextProvider,
        upstream_client: UpstreamClient,
        responder: Optional[Responder] = None,
        gate: Optional[ValidationGate] = None,
        conversion: Optional[ConversionPipeline] = None,
    ):
        self.settings = settings
        self.context_provider = context_provider
        self.upstream_client = upstream_client
        self.responder = responder
        self.gate = gate or ValidationGate()
        self.conversion = conversion or ConversionPipeline()
        self._used = False

    async def run(self, exchange: Exchange) -> TerminalState:
        if self._used:
            raise RuntimeError("ProxyOrchestrator handles a single exchange")
        self._used = True

        state: TerminalState
        try:
            awaiting = start(exchange, self.settings)
            context = await self.context_provider.acquire(self.settings.fhir_version)
            processing = on_context_ready(awaiting, context)
            next_state = process_client_request(processing, self.gate, self.conversion)
            if isinstance(next_state, Responded):
                state = next_state
            else:
                reply = await self.upstream_client.forward_request(next_state.request)
                state = on_upstream_reply(next_state, reply, self.conversion)
        except Exception as exc:
            state = fail(exchange, exc)

        await self._report(state)
        return state

    async def _report(self, state: TerminalState) -> None:
        if self.responder is None:
            return
        if isinstance(state, Responded):
            await self.responder.respond(state.response)
        else:
            await self.responder.fail(state.error)


__all__ = [
    "AwaitingContext",
    "ProcessingRequest",
    "AwaitingUpstream",
    "Responded",
    "Errored",
    "TerminalState",
    "start",
    "on_context_ready",
    "process_client_request",
    "on_upstream_reply",
    "fail",
    "reply_payload",
    "bad_request",
    "ProxyOrchestrator",
]
