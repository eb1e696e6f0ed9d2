# fhirproxy/core/errors/exceptions.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from . import codes


@dataclass
class FhirProxyError(Exception):
    """
    Base exception for everything the mediator raises on purpose.

    phase tells where the failure happened (config / context / validate /
    convert / upstream) so the gateway and the logs can tell them apart.
    """
    message: str
    error_code: str = codes.UNKNOWN
    phase: str = "unknown"
    details: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    @property
    def is_client_error(self) -> bool:
        return self.error_code in codes.CLIENT_CODES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "phase": self.phase,
            "details": self.details,
        }


@dataclass
class ConfigurationError(FhirProxyError):
    """Unsupported upstream format, unsupported FHIR version or unreadable settings."""
    error_code: str = codes.INVALID_CONFIG
    phase: str = "config"

    @classmethod
    def unsupported_upstream_format(cls, value: Any) -> "ConfigurationError":
        return cls(
            message=f"Unknown upstream format specified {value}",
            error_code=codes.UNSUPPORTED_UPSTREAM_FORMAT,
            details={"upstream_format": value},
        )

    @classmethod
    def unsupported_fhir_version(cls, value: Any) -> "ConfigurationError":
        return cls(
            message=f"Unsupported option specified for fhir-context: {value}",
            error_code=codes.UNSUPPORTED_FHIR_VERSION,
            phase="context",
            details={"fhir_version": value},
        )


@dataclass
class DataFormatError(FhirProxyError):
    """Raised by the FHIR parsers and encoders when a document is malformed."""
    error_code: str = codes.INVALID_SYNTAX
    phase: str = "parse"


@dataclass
class ClientPayloadError(FhirProxyError):
    """
    The request body was rejected by the validation gate.

    outcome holds the OperationOutcome resource (dict) describing why; it is
    the only error the mediator answers to the client with FHIR content.
    """
    error_code: str = codes.INVALID_RESOURCE
    phase: str = "validate"
    outcome: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UnsupportedFormat(FhirProxyError):
    error_code: str = codes.UNSUPPORTED_FORMAT
    phase: str = "convert"


@dataclass
class ConversionFault(FhirProxyError):
    """Parse/encode failure after the payload was already accepted."""
    error_code: str = codes.CONVERSION_FAILED
    phase: str = "convert"

    @classmethod
    def wrap(cls, exc: BaseException, *, direction: str) -> "ConversionFault":
        return cls(
            message=f"Failed to convert {direction} body: {exc}",
            details={"direction": direction},
            cause=exc,
        )


@dataclass
class UpstreamError(FhirProxyError):
    """Transport failure talking to the upstream FHIR server."""
    error_code: str = codes.UPSTREAM_UNAVAILABLE
    phase: str = "upstream"
