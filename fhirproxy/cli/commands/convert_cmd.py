# fhirproxy/cli/commands/convert_cmd.py
"""
Convert command - offline JSON <-> XML conversion of a resource file
"""

import sys
from pathlib import Path

from fhirproxy.core.errors import FhirProxyError
from fhirproxy.core.fhir import ContentKind, FhirContext
from fhirproxy.core.proxy import ContentPayload, ConversionPipeline


def register_command(subparsers):
    parser = subparsers.add_parser(
        "convert",
        help="Convert a FHIR resource file between JSON and XML",
    )
    parser.add_argument("file", help="Resource file (.json or .xml)")
    parser.add_argument("--to", choices=["json", "xml"], required=True, help="Target serialization")
    parser.add_argument(
        "--from",
        dest="source",
        choices=["json", "xml"],
        help="Source serialization (default: from the file extension)",
    )
    parser.add_argument("--fhir-version", default="R4", help="FHIR version: DSTU2 or R4 (default: R4)")
    parser.set_defaults(func=run_convert)
    return parser


def detect_kind(path: Path, explicit=None) -> ContentKind:
    if explicit:
        return ContentKind(explicit)
    return ContentKind.XML if path.suffix.lower() == ".xml" else ContentKind.JSON


def run_convert(args) -> int:
    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    try:
        context = FhirContext.for_version(args.fhir_version)
        payload = ContentPayload(kind=detect_kind(path, args.source), text=text)
        converted = ConversionPipeline(pretty=True).convert(context, payload, ContentKind(args.to))
    except FhirProxyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(converted.text)
    return 0


__all__ = ["register_command", "detect_kind"]
