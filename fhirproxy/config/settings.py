# fhirproxy/config/settings.py
"""
Mediator settings

Immutable snapshot of everything the mediator reads from configuration.
Every field has a code default.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict


@dataclass(frozen=True)
class ProxySettings:
    # FHIR generation of the resource grammar ("DSTU2" or "R4")
    fhir_version: str = "R4"
    # Serialization the upstream speaks: "Client", "JSON" or "XML"
    upstream_format: str = "Client"
    validation_enabled: bool = False

    upstream_scheme: str = "http"
    upstream_host: str = "localhost"
    upstream_port: int = 8080
    upstream_timeout_s: float = 60.0

    listen_host: str = "127.0.0.1"
    listen_port: int = 8604
    log_level: str = "INFO"

    @classmethod
    def default(cls) -> "ProxySettings":
        return cls()

    @classmethod
    def field_names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    def replace(self, **changes: Any) -> "ProxySettings":
        return replace(self, **changes)

    @property
    def upstream_base_url(self) -> str:
        return f"{self.upstream_scheme}://{self.upstream_host}:{self.upstream_port}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Platform (kebab-case) names of the settings; environment overrides are
# derived from them: "fhir-context" -> FHIR_CONTEXT.
KEY_ALIASES: Dict[str, str] = {
    "fhir-context": "fhir_version",
    "upstream-format": "upstream_format",
    "validation-enabled": "validation_enabled",
    "upstream-scheme": "upstream_scheme",
    "upstream-host": "upstream_host",
    "upstream-port": "upstream_port",
    "upstream-timeout": "upstream_timeout_s",
    "listen-host": "listen_host",
    "listen-port": "listen_port",
    "log-level": "log_level",
}


def env_key(kebab_key: str) -> str:
    return kebab_key.upper().replace("-", "_")


__all__ = ["ProxySettings", "KEY_ALIASES", "env_key"]
