from __future__ import annotations

import httpx
import pytest

from fluentrest.config.settings import get_settings
from fluentrest.core.env import load_dotenv_if_present


class RecordingTransport:
    """Transport double: records what it is asked and replies with a canned response."""

    def __init__(self, response: httpx.Response | None = None, unsupported: tuple[str, ...] = ()):
        self.response = response if response is not None else httpx.Response(200)
        self.unsupported = unsupported
        self.supports_calls: list[str] = []
        self.requests = []

    def supports(self, method: str) -> bool:
        self.supports_calls.append(method)
        return method not in self.unsupported

    def send(self, request):
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def fresh_settings():
    """Drop cached settings/env before and after a test that changes the environment."""
    get_settings.cache_clear()
    load_dotenv_if_present.cache_clear()
    yield
    get_settings.cache_clear()
    load_dotenv_if_present.cache_clear()


@pytest.fixture
def make_transport():
    return RecordingTransport
