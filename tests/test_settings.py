from __future__ import annotations

import logging.config
import os

import pytest

from fluentrest.config.settings import get_service, get_settings
from fluentrest.core.env import find_env_file, load_dotenv_if_present
from fluentrest.core.logging import configure_logging

SERVICES_YAML = """
http:
  timeout_seconds: 5
  unsupported_methods: [patch]
services:
  cool:
    scheme: https
    host: cool-service.com
    port: 8443
    context_path: api
    version: v1
    endpoints:
      updateCoolStuff: update/stuff/{stuffId}
    common_query_params:
      apiKey: abc
      tag: [x, y]
    common_fragment: top
"""


def test_packaged_defaults_load(fresh_settings):
    settings = get_settings()

    assert settings.app.log_level == "INFO"
    assert settings.http.timeout_seconds == 15
    assert settings.http.raise_for_status is True
    assert "httpbin" in settings.services


def test_services_are_read_from_external_yaml(fresh_settings, monkeypatch, tmp_path):
    config_path = tmp_path / "fluentrest.yaml"
    config_path.write_text(SERVICES_YAML, encoding="utf-8")
    monkeypatch.setenv("FLUENTREST_CONFIG_PATH", str(config_path))

    settings = get_settings()
    service = get_service("cool")

    assert settings.http.unsupported_methods == ["PATCH"]
    assert service.port == "8443"
    assert service.common_query_params == {"apiKey": ["abc"], "tag": ["x", "y"]}
    assert (
        service.resolver("updateCoolStuff").uri_variable("stuffId", 7).build_string()
        == "https://cool-service.com:8443/api/v1/update/stuff/7?apiKey=abc&tag=x&tag=y#top"
    )


def test_get_service_returns_private_copy(fresh_settings):
    service = get_service("httpbin")
    service.add_endpoint("extra", "extra/path").set_version("v9")

    again = get_service("httpbin")

    assert "extra" not in again.endpoints
    assert again.version is None


def test_get_service_unknown_name(fresh_settings):
    with pytest.raises(KeyError, match="nope"):
        get_service("nope")


def test_env_overrides(fresh_settings, monkeypatch):
    monkeypatch.setenv("FLUENTREST_LOG_LEVEL", "debug")
    monkeypatch.setenv("FLUENTREST_HTTP_TIMEOUT_SECONDS", "2.5")

    settings = get_settings()

    assert settings.app.log_level == "debug"
    assert settings.http.timeout_seconds == 2.5


def test_dotenv_file_is_loaded_without_overriding_process_env(fresh_settings, monkeypatch, tmp_path):
    # One variable only the file sets, one that the process already has.
    env_file = tmp_path / ".env"
    env_file.write_text("FLUENTREST_TEST_FROM_DOTENV=loaded\nFLUENTREST_TEST_PRESET=from-file\n", encoding="utf-8")

    # Point discovery at the temp file instead of walking up from the repo.
    monkeypatch.setenv("FLUENTREST_ENV_FILE", str(env_file))
    monkeypatch.setenv("FLUENTREST_TEST_PRESET", "from-process")

    # Registered so monkeypatch removes the variable that load_dotenv sets.
    monkeypatch.setenv("FLUENTREST_TEST_FROM_DOTENV", "placeholder")
    monkeypatch.delenv("FLUENTREST_TEST_FROM_DOTENV")

    # The explicit path wins and is what gets loaded (fresh_settings cleared the load cache).
    assert find_env_file() == env_file.resolve()
    assert load_dotenv_if_present() == env_file.resolve()

    # New keys come from the file; keys already in the process env are never overridden.
    assert os.environ["FLUENTREST_TEST_FROM_DOTENV"] == "loaded"
    assert os.environ["FLUENTREST_TEST_PRESET"] == "from-process"


def test_find_env_file_searches_upwards(monkeypatch, tmp_path):
    monkeypatch.delenv("FLUENTREST_ENV_FILE", raising=False)
    (tmp_path / ".env").write_text("", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_env_file(nested) == (tmp_path / ".env").resolve()


def test_configure_logging_applies_level_from_settings(fresh_settings, monkeypatch):
    monkeypatch.setenv("FLUENTREST_LOG_LEVEL", "debug")
    captured: list[dict] = []
    monkeypatch.setattr(logging.config, "dictConfig", captured.append)

    configure_logging()

    (config,) = captured
    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["console"]["level"] == "DEBUG"
    assert config["loggers"]["httpx"]["level"] == "WARNING"
