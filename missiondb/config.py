"""Configuration resolution for the moon mission console."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

import yaml

URL_KEY = "APP_DB_URL"
USER_KEY = "APP_DB_USER"
PASSWORD_KEY = "APP_DB_PASS"
REQUIRED_KEYS = (URL_KEY, USER_KEY, PASSWORD_KEY)


class ConfigurationError(RuntimeError):
    """Raised when the database settings cannot be resolved."""


def env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def resolve_value(
    key: str,
    properties: Mapping[str, str],
    environ: Mapping[str, str],
) -> Optional[str]:
    """Look ``key`` up in ``properties`` first, then in ``environ``.

    Values are trimmed and blank values are treated as missing.
    """

    value = properties.get(key)
    if value is None or not str(value).strip():
        value = environ.get(key)
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection parameters for the application database."""

    url: str
    username: str
    password: str

    @staticmethod
    def resolve(
        properties: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "DatabaseSettings":
        """Build settings from process properties with an environment fallback."""

        properties = properties or {}
        environ = os.environ if environ is None else environ

        values = {key: resolve_value(key, properties, environ) for key in REQUIRED_KEYS}
        missing = [key for key, value in values.items() if value is None]
        if missing:
            raise ConfigurationError(
                f"Missing DB configuration: {', '.join(missing)}. Provide "
                f"{', '.join(REQUIRED_KEYS)} as properties (-D KEY=VALUE or --config) "
                "or environment variables."
            )

        return DatabaseSettings(
            url=str(values[URL_KEY]),
            username=str(values[USER_KEY]),
            password=str(values[PASSWORD_KEY]),
        )


def parse_property_definitions(definitions: Iterable[str]) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` definitions given on the command line."""

    properties: Dict[str, str] = {}
    for item in definitions:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigurationError(f"Invalid property definition '{item}', expected KEY=VALUE")
        properties[key] = value
    return properties


def load_properties_file(path: Path) -> Dict[str, str]:
    """Load a flat YAML mapping of properties."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read properties file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Properties file {path} is not valid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Properties file {path} must contain a mapping of keys to values")

    return {str(key): "" if value is None else str(value) for key, value in raw.items()}


def collect_properties(
    config_path: Optional[Path],
    definitions: Iterable[str],
    *,
    defaults: Mapping[str, str] | None = None,
) -> Dict[str, str]:
    """Merge properties: file, then ``defaults``, then command-line definitions."""

    properties: Dict[str, str] = {}
    if config_path is not None:
        properties.update(load_properties_file(config_path))
    if defaults:
        properties.update(defaults)
    properties.update(parse_property_definitions(definitions))
    return properties


__all__ = [
    "ConfigurationError",
    "DatabaseSettings",
    "PASSWORD_KEY",
    "REQUIRED_KEYS",
    "URL_KEY",
    "USER_KEY",
    "collect_properties",
    "env_flag",
    "load_properties_file",
    "parse_property_definitions",
    "resolve_value",
]
