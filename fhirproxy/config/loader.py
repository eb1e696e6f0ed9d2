# fhirproxy/config/loader.py
"""
Configuration Loader

Loads mediator settings from a YAML file and the environment, with code
defaults as fallback.

Design principle:
- Code = truth (has all defaults)
- YAML = input parameters (optional)
- Environment overrides YAML (FHIR_CONTEXT, UPSTREAM_FORMAT, ...)
- System works without YAML
"""

from __future__ import annotations

import logging
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from fhirproxy.core.errors import ConfigurationError

from .settings import KEY_ALIASES, ProxySettings, env_key


logger = logging.getLogger(__name__)

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _default_paths() -> list:
    return [
        Path.home() / ".fhirproxy" / "config.yml",
    ]


def _load_yaml(config_path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """
    Load the YAML mapping.

    An explicit path must exist and parse; the default locations are optional.
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(
                message=f"Configuration file not found: {path}",
                details={"path": str(path)},
            )
        paths = [path]
    else:
        paths = [p for p in _default_paths() if p.exists()]

    for path in paths:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                message=f"Failed to read configuration file {path}: {exc}",
                details={"path": str(path)},
                cause=exc,
            ) from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                message=f"Configuration file {path} must contain a mapping",
                details={"path": str(path)},
            )
        logger.info("Loaded configuration from %s", path)
        return data

    return None


def _field_name(key: str) -> Optional[str]:
    if key in KEY_ALIASES:
        return KEY_ALIASES[key]
    snake = key.replace("-", "_")
    return snake if snake in ProxySettings.field_names() else None


def _coerce(name: str, value: Any, source: str) -> Any:
    """Convert value to the type of the ProxySettings field name."""
    field_type = {f.name: f.type for f in fields(ProxySettings)}[name]

    def invalid() -> ConfigurationError:
        return ConfigurationError(
            message=f"Invalid value for {name} in {source}: {value!r}",
            details={"field": name, "value": repr(value), "source": source},
        )

    if field_type in (bool, "bool"):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE:
            return True
        if isinstance(value, str) and value.strip().lower() in _FALSE:
            return False
        raise invalid()

    if field_type in (int, "int"):
        if isinstance(value, bool):
            raise invalid()
        if isinstance(value, int):
            return value
        # Platform configuration sends numbers as doubles
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise invalid() from None
        raise invalid()

    if field_type in (float, "float"):
        if isinstance(value, bool):
            raise invalid()
        try:
            return float(value)
        except (TypeError, ValueError):
            raise invalid() from None

    if isinstance(value, (dict, list)):
        raise invalid()
    return str(value)


def _merge(settings: ProxySettings, data: Mapping[str, Any], source: str) -> ProxySettings:
    changes: Dict[str, Any] = {}
    for key, value in data.items():
        name = _field_name(str(key))
        if name is None:
            logger.warning("Ignoring unknown configuration key %r in %s", key, source)
            continue
        if value is None:
            continue
        changes[name] = _coerce(name, value, source)
    return settings.replace(**changes) if changes else settings


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for kebab, name in KEY_ALIASES.items():
        value = environ.get(env_key(kebab))
        if value is not None:
            overrides[name] = value
    return overrides


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProxySettings:
    """
    Load mediator settings.

    Args:
        config_path: Optional path to a YAML file (kebab-case or snake_case keys)
        environ: Environment to read overrides from (default: os.environ)

    Returns:
        ProxySettings instance (always has code defaults)

    Raises:
        ConfigurationError: unreadable file or a value of the wrong type
    """
    settings = ProxySettings.default()

    yaml_data = _load_yaml(config_path)
    if yaml_data:
        settings = _merge(settings, yaml_data, source="configuration file")

    overrides = _environment_overrides(os.environ if environ is None else environ)
    if overrides:
        settings = _merge(settings, overrides, source="environment")

    return settings


__all__ = ["load_settings"]
