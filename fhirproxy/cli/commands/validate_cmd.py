# fhirproxy/cli/commands/validate_cmd.py
"""
Validate command - run the validation gate over a resource file

Exit code 0 when the resource passes, 1 otherwise (the OperationOutcome is
printed in the file's serialization).
"""

import sys
from pathlib import Path

from fhirproxy.core.errors import FhirProxyError
from fhirproxy.core.fhir import FhirContext
from fhirproxy.core.proxy import ValidationGate

from .convert_cmd import detect_kind


def register_command(subparsers):
    parser = subparsers.add_parser(
        "validate",
        help="Validate a FHIR resource file",
    )
    parser.add_argument("file", help="Resource file (.json or .xml)")
    parser.add_argument("--fhir-version", default="R4", help="FHIR version: DSTU2 or R4 (default: R4)")
    parser.add_argument(
        "--format",
        choices=["json", "xml"],
        help="Serialization of the file (default: from the file extension)",
    )
    parser.set_defaults(func=run_validate)
    return parser


def run_validate(args) -> int:
    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    kind = detect_kind(path, args.format)
    try:
        context = FhirContext.for_version(args.fhir_version)
        outcome = ValidationGate().validate(context, text, kind.mime_type)
        if outcome.passed:
            print(f"{path}: OK ({context.version})")
            return 0
        rendered = context.new_parser_for_kind(kind).encode_resource_to_string(outcome.issue, pretty=True)
    except FhirProxyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(rendered)
    return 1


__all__ = ["register_command"]
