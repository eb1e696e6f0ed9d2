# fhirproxy/core/proxy/gate.py
"""
Validation gate

Optional check of a request body before it is forwarded. Failures are
answered to the client with an OperationOutcome and HTTP 400; nothing is
forwarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from fhirproxy.core.errors import ClientPayloadError, DataFormatError
from fhirproxy.core.fhir.context import FhirContext
from fhirproxy.core.fhir.outcome import outcome_from_exception

from .exchange import decode_body


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    """passed, or the OperationOutcome (dict) explaining why not."""
    passed: bool
    issue: Optional[Dict[str, Any]] = None

    def raise_for_failure(self) -> None:
        if self.passed:
            return
        raise ClientPayloadError(
            message="Request body failed validation",
            outcome=dict(self.issue or {}),
        )


PASSED = ValidationOutcome(passed=True)


class ValidationGate:
    def validate(
        self,
        context: FhirContext,
        body: Optional[Union[str, bytes]],
        declared_content_type: Optional[str],
    ) -> ValidationOutcome:
        """
        Parse body with the parser for the sender's declared content type,
        then validate the resource. Bytes are decoded with the declared charset
        first; undecodable bytes count as malformed syntax.

        Malformed syntax yields an outcome carrying the parse error message;
        a semantically invalid resource yields the validator's own outcome.
        The parsed resource is discarded either way.
        """
        parser = context.new_parser(declared_content_type)
        try:
            text = decode_body(body, declared_content_type) if isinstance(body, bytes) else body
            resource = parser.parse_resource(text or "")
        except DataFormatError as exc:
            logger.debug("Request body is not well-formed: %s", exc.message)
            return ValidationOutcome(
                passed=False,
                issue=outcome_from_exception(exc, context.version),
            )

        result = context.new_validator().validate_with_result(resource)
        if result.is_successful:
            return PASSED

        logger.debug("Request body failed validation with %d issue(s)", len(result.issues))
        return ValidationOutcome(passed=False, issue=result.to_operation_outcome())


__all__ = ["ValidationGate", "ValidationOutcome", "PASSED"]
