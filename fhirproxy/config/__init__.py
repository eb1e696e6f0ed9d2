# fhirproxy/config/__init__.py
"""
Mediator configuration

Design principles:
1. Code has defaults, YAML and environment are input parameters
2. Settings are immutable snapshots, swapped as a whole on reconfiguration
"""

from .settings import KEY_ALIASES, ProxySettings, env_key
from .loader import load_settings
from .validator import ConfigIssue, validate_settings

__all__ = [
    "ProxySettings",
    "KEY_ALIASES",
    "env_key",
    "load_settings",
    "ConfigIssue",
    "validate_settings",
]
