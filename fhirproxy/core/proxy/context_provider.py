# fhirproxy/core/proxy/context_provider.py
"""
Shared FHIR context cache

Holds at most one FhirContext together with the version tag it was built
for. A request for another tag rebuilds and replaces it. Builds are
single-flight behind an asyncio.Lock.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from fhirproxy.core.errors import ConfigurationError
from fhirproxy.core.fhir.context import FhirContext, normalize_version


ContextFactory = Callable[[str], FhirContext]


class ContextProvider:
    def __init__(self, factory: Optional[ContextFactory] = None):
        self._factory = factory or FhirContext.for_version
        self._lock: Optional[asyncio.Lock] = None
        self._tag: Optional[str] = None
        self._context: Optional[FhirContext] = None

    @property
    def cached_tag(self) -> Optional[str]:
        return self._tag

    async def acquire(self, version_tag: str) -> FhirContext:
        """
        Context for version_tag, building it if the cache holds another version.

        Raises ConfigurationError for an unsupported tag.
        """
        tag = normalize_version(version_tag)
        if tag is None:
            raise ConfigurationError.unsupported_fhir_version(version_tag)

        cached = self._context
        if cached is not None and self._tag == tag:
            return cached

        # Created on first use so it binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._context is None or self._tag != tag:
                self._context = self._factory(tag)
                self._tag = tag
            return self._context


__all__ = ["ContextProvider", "ContextFactory"]
