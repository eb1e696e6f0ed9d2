# fhirproxy/core/errors/codes.py
from __future__ import annotations

from typing import Final


# ---- canonical error codes (stable public contract) ----
# generic
UNKNOWN: Final[str] = "UNKNOWN"
INTERNAL_ERROR: Final[str] = "INTERNAL_ERROR"

# client payload
INVALID_SYNTAX: Final[str] = "INVALID_SYNTAX"
INVALID_RESOURCE: Final[str] = "INVALID_RESOURCE"

# configuration
INVALID_CONFIG: Final[str] = "INVALID_CONFIG"
UNSUPPORTED_UPSTREAM_FORMAT: Final[str] = "UNSUPPORTED_UPSTREAM_FORMAT"
UNSUPPORTED_FHIR_VERSION: Final[str] = "UNSUPPORTED_FHIR_VERSION"

# conversion
UNSUPPORTED_FORMAT: Final[str] = "UNSUPPORTED_FORMAT"
CONVERSION_FAILED: Final[str] = "CONVERSION_FAILED"

# transport
UPSTREAM_UNAVAILABLE: Final[str] = "UPSTREAM_UNAVAILABLE"


# ---- semantic groups (internal helpers) ----

# Recoverable: answered to the client with an OperationOutcome (HTTP 400).
CLIENT_CODES: Final[set[str]] = {
    INVALID_SYNTAX,
    INVALID_RESOURCE,
}

