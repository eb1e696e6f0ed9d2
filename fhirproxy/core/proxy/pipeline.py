# fhirproxy/core/proxy/pipeline.py
"""
Proxy pipeline

Process-wide composition: the current settings snapshot, the shared FHIR
context cache and the upstream client. Each exchange gets its own
ProxyOrchestrator.
"""

from __future__ import annotations

import logging
from typing import Optional

from fhirproxy.config.settings import ProxySettings

from .context_provider import ContextProvider
from .conversion import ConversionPipeline
from .exchange import Exchange
from .gate import ValidationGate
from .interfaces import FinalResponse, Responder, UpstreamClient
from .orchestrator import Errored, ProxyOrchestrator


logger = logging.getLogger(__name__)


class ProxyPipeline:
    def __init__(
        self,
        *,
        settings: ProxySettings,
        upstream_client: UpstreamClient,
        context_provider: Optional[ContextProvider] = None,
        gate: Optional[ValidationGate] = None,
        conversion: Optional[ConversionPipeline] = None,
    ):
        self._settings = settings
        self.upstream_client = upstream_client
        self.context_provider = context_provider or ContextProvider()
        self.gate = gate or ValidationGate()
        self.conversion = conversion or ConversionPipeline()

    @property
    def settings(self) -> ProxySettings:
        return self._settings

    def reconfigure(self, settings: ProxySettings) -> None:
        """
        Swap the settings used by exchanges that arrive from now on.

        Exchanges in flight keep the snapshot they started with. A changed
        FHIR version rebuilds the shared context on the next exchange.
        """
        logger.info(
            "Reconfigured: fhir_version=%s upstream_format=%s validation_enabled=%s upstream=%s",
            settings.fhir_version,
            settings.upstream_format,
            settings.validation_enabled,
            settings.upstream_base_url,
        )
        self._settings = settings

    def new_orchestrator(self, responder: Optional[Responder] = None) -> ProxyOrchestrator:
        return ProxyOrchestrator(
            settings=self._settings,
            context_provider=self.context_provider,
            upstream_client=self.upstream_client,
            responder=responder,
            gate=self.gate,
            conversion=self.conversion,
        )

    async def process_request(self, exchange: Exchange) -> FinalResponse:
        """
        Run one exchange.

        Returns the response for the client; internal faults are re-raised
        (FhirProxyError subclasses, UpstreamError for transport failures).
        """
        state = await self.new_orchestrator().run(exchange)
        if isinstance(state, Errored):
            raise state.error
        return state.response

    async def aclose(self) -> None:
        close = getattr(self.upstream_client, "aclose", None)
        if close is not None:
            await close()


__all__ = ["ProxyPipeline"]
