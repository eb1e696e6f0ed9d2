# fhirproxy/cli/main.py
import argparse
import sys

from fhirproxy import __version__
from fhirproxy.cli.commands import COMMANDS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "fhirproxy",
        description="FHIR proxy mediator - JSON/XML converting proxy for FHIR servers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    for command in COMMANDS:
        command.register_command(sub)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # If no command provided, show help
    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
