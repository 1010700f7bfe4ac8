# src/fluentrest/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/fluentrest/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `FLUENTREST_CONFIG_PATH`
- environment variables (e.g., `FLUENTREST_LOG_LEVEL`, `FLUENTREST_HTTP_TIMEOUT_SECONDS`)

Named service descriptors live under `services:` so call sites can look them up by
name instead of hard-coding hosts and endpoint paths.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from fluentrest.core.env import load_dotenv_if_present
from fluentrest.uri.service import ServiceDescriptor


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `fluentrest.config`."""
    text = resources.files("fluentrest.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "fluentrest"
    log_level: str = "INFO"


class HttpSettings(BaseModel):
    timeout_seconds: float = Field(15, gt=0)
    user_agent: str = "fluentrest/0.1.0"
    raise_for_status: bool = True
    # Methods the underlying client cannot send; verbs listed here fail at selection time.
    unsupported_methods: list[str] = Field(default_factory=list)

    @field_validator("unsupported_methods")
    @classmethod
    def _upper(cls, value: list[str]) -> list[str]:
        return [m.upper() for m in value]


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    services: dict[str, ServiceDescriptor] = Field(default_factory=dict)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload."""
    data = dict(data)
    log_level = os.getenv("FLUENTREST_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    timeout = os.getenv("FLUENTREST_HTTP_TIMEOUT_SECONDS")
    if timeout:
        data.setdefault("http", {})["timeout_seconds"] = float(timeout)

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("FLUENTREST_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")


def get_service(name: str, settings: Settings | None = None) -> ServiceDescriptor:
    """Return a private copy of the configured service `name`.

    The copy can be mutated (version, endpoints, ...) without touching the cached settings.

    Raises:
        KeyError: If no service with that name is configured.
    """
    services = (settings or get_settings()).services
    if name not in services:
        known = ", ".join(sorted(services)) or "none"
        raise KeyError(f"Unknown service '{name}' (configured: {known})")
    return services[name].model_copy(deep=True)
