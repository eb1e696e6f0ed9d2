# fhirproxy/cli/commands/__init__.py
from . import convert_cmd, proxy_cmd, validate_cmd

COMMANDS = (proxy_cmd, convert_cmd, validate_cmd)

__all__ = ["COMMANDS"]
