# fhirproxy/cli/commands/proxy_cmd.py
"""
Proxy command - Start the FHIR proxy mediator

Minimal, production-oriented CLI:
- Loads settings (YAML + environment)
- Refuses to start on invalid settings
- Binds an ASGI server (uvicorn)
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from fhirproxy.config import load_settings, validate_settings
from fhirproxy.core.errors import ConfigurationError
from fhirproxy.gateways.proxy import create_proxy_app


logger = logging.getLogger(__name__)


# ----------------------------
# CLI registration
# ----------------------------

def register_command(subparsers):
    parser = subparsers.add_parser(
        "proxy",
        help="Start the FHIR proxy mediator",
        description=(
            "FHIR proxy mediator - converts FHIR resources between JSON and XML\n"
            "on their way to and from an upstream FHIR server."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--conf",
        help="YAML configuration file (default: ~/.fhirproxy/config.yml if present)",
    )

    parser.add_argument(
        "--listen",
        help="Listen address HOST:PORT (default: from configuration, 127.0.0.1:8604)",
    )

    parser.set_defaults(func=run_proxy)
    return parser


# ----------------------------
# Main entry
# ----------------------------

def run_proxy(args) -> int:
    try:
        settings = load_settings(Path(args.conf) if args.conf else None)
    except ConfigurationError as e:
        print(f"[fhirproxy.proxy] {e.message}", file=sys.stderr)
        return 1

    if args.listen:
        try:
            host, port = parse_listen_address(args.listen)
        except ValueError as e:
            print(f"[fhirproxy.proxy] {e}", file=sys.stderr)
            return 1
        settings = settings.replace(listen_host=host, listen_port=port)

    issues = validate_settings(settings)
    for issue in issues:
        print(str(issue), file=sys.stderr)
    if any(issue.level == "error" for issue in issues):
        return 1

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Effective settings: %s", settings.to_dict())

    app = create_proxy_app(settings)

    print(
        f"[fhirproxy.proxy] listen={settings.listen_host}:{settings.listen_port} "
        f"upstream={settings.upstream_base_url} format={settings.upstream_format} "
        f"fhir={settings.fhir_version} validation={'on' if settings.validation_enabled else 'off'}"
    )

    try:
        uvicorn.run(
            app,
            host=settings.listen_host,
            port=settings.listen_port,
            log_level=settings.log_level.lower(),
            access_log=False,
        )
    except KeyboardInterrupt:
        print("\n[fhirproxy.proxy] stopped")
    return 0


# ----------------------------
# Helpers
# ----------------------------

def parse_listen_address(listen: str) -> tuple:
    """'host:port' or 'port' -> (host, port). Raises ValueError."""
    if ":" in listen:
        host, port_str = listen.rsplit(":", 1)
    else:
        host, port_str = "127.0.0.1", listen
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid listen address: {listen}") from None
    return host or "127.0.0.1", port


__all__ = ["register_command", "parse_listen_address"]
