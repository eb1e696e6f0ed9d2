# fhirproxy/core/proxy/__init__.py
"""
Proxy - Core business logic layer

Contains the protocol-agnostic mediator logic:
- content negotiation and format policy
- validation gate and conversion pipeline
- per-exchange state machine and the shared context cache
- abstract interfaces of the upstream caller and the responder

Gateway implementation lives in gateways/proxy/
"""

from .context_provider import ContextProvider
from .conversion import ConversionPipeline
from .exchange import BODY_METHODS, TRANSACTION_ID_HEADER, ContentPayload, Exchange, HeaderMap
from .gate import ValidationGate, ValidationOutcome
from .interfaces import FinalResponse, Responder, UpstreamClient, UpstreamReply, UpstreamRequest
from .negotiation import resolve_client_content_type
from .orchestrator import Errored, ProxyOrchestrator, Responded
from .pipeline import ProxyPipeline
from .policy import FormatDecision, UpstreamFormatMode, response_kind, target_kind
from .upstream import HttpxUpstreamClient

__all__ = [
    "ContextProvider",
    "ConversionPipeline",
    "BODY_METHODS",
    "TRANSACTION_ID_HEADER",
    "ContentPayload",
    "Exchange",
    "HeaderMap",
    "ValidationGate",
    "ValidationOutcome",
    "FinalResponse",
    "Responder",
    "UpstreamClient",
    "UpstreamReply",
    "UpstreamRequest",
    "resolve_client_content_type",
    "Errored",
    "ProxyOrchestrator",
    "Responded",
    "ProxyPipeline",
    "FormatDecision",
    "UpstreamFormatMode",
    "response_kind",
    "target_kind",
    "HttpxUpstreamClient",
]
