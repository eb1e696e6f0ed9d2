# fhirproxy/config/validator.py
"""
Configuration Validator

Validates settings for unsupported values and misleading combinations.
Returns structured issues with level (warn/error), path, message, hint.
"""

from dataclasses import dataclass
from typing import List, Literal

from fhirproxy.core.fhir.context import normalize_version
from fhirproxy.core.fhir.structures import SUPPORTED_VERSIONS

from .settings import ProxySettings


UPSTREAM_FORMATS = ("Client", "JSON", "XML")
SCHEMES = ("http", "https")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class ConfigIssue:
    """
    Configuration validation issue

    Structured output for CLI/logging.
    """
    level: Literal["warn", "error"]
    path: str  # e.g., "upstream-format"
    message: str
    hint: str = ""

    def __str__(self) -> str:
        hint_str = f"\n   Hint: {self.hint}" if self.hint else ""
        return f"{self.level.upper()} [{self.path}] {self.message}{hint_str}"


def validate_settings(settings: ProxySettings) -> List[ConfigIssue]:
    """
    Validate settings.

    Returns:
        List of issues (warn/error level)
    """
    issues = []

    if settings.upstream_format.lower() not in [f.lower() for f in UPSTREAM_FORMATS]:
        issues.append(ConfigIssue(
            level="error",
            path="upstream-format",
            message=f"Unknown upstream format: '{settings.upstream_format}'",
            hint="Set upstream-format to one of: " + ", ".join(UPSTREAM_FORMATS),
        ))

    if normalize_version(settings.fhir_version) is None:
        issues.append(ConfigIssue(
            level="error",
            path="fhir-context",
            message=f"Unsupported FHIR version: '{settings.fhir_version}'",
            hint="Set fhir-context to one of: " + ", ".join(SUPPORTED_VERSIONS),
        ))

    if settings.upstream_scheme.lower() not in SCHEMES:
        issues.append(ConfigIssue(
            level="error",
            path="upstream-scheme",
            message=f"Unsupported upstream scheme: '{settings.upstream_scheme}'",
            hint="Set upstream-scheme to http or https",
        ))

    for path, port in (("upstream-port", settings.upstream_port), ("listen-port", settings.listen_port)):
        if not 0 < port < 65536:
            issues.append(ConfigIssue(
                level="error",
                path=path,
                message=f"Port out of range: {port}",
                hint="Use a port between 1 and 65535",
            ))

    if settings.log_level.upper() not in LOG_LEVELS:
        issues.append(ConfigIssue(
            level="error",
            path="log-level",
            message=f"Unknown log level: '{settings.log_level}'",
            hint="Set log-level to one of: " + ", ".join(LOG_LEVELS),
        ))

    if settings.upstream_timeout_s <= 0:
        issues.append(ConfigIssue(
            level="error",
            path="upstream-timeout",
            message=f"Timeout must be positive: {settings.upstream_timeout_s}",
        ))

    # Validation with a fixed upstream format parses the body twice
    if settings.validation_enabled and settings.upstream_format.lower() in ("json", "xml"):
        issues.append(ConfigIssue(
            level="warn",
            path="validation-enabled",
            message="validation with a fixed upstream format parses every request body twice",
        ))

    return issues


__all__ = ["ConfigIssue", "validate_settings"]
