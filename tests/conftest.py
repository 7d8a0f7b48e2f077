"""Shared fixtures: settings without real credentials and a fake upstream."""

from collections import Counter

import httpx
import pytest

from courtrecords.config import load_settings
from courtrecords.providers.transport import RetryingTransport

KLEOPATRA_HOST = "court-api.kleopatra.io"
V17_HOST = "api.ecourts.gov.in"
PHOENIX_HOST = "phoenix.akshit.me"
NAPIX_HOST = "napix.gov.in"
PORTAL_HOST = "services.ecourts.gov.in"


class FakeUpstream:
    """Routes requests to per-host handlers and counts calls per host."""

    def __init__(self, **handlers):
        self.handlers = handlers
        self.calls = Counter()
        self.requests = []

    def __call__(self, request: httpx.Request):
        host = request.url.host
        self.calls[host] += 1
        self.requests.append(request)
        handler = self.handlers.get(host)
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        return handler(request)


@pytest.fixture
def settings():
    return load_settings({"COURT_API_KEY": "test-key"})


@pytest.fixture
def sleeps():
    """Backoff delays requested by the transport, instead of real sleeping."""
    return []


@pytest.fixture
def make_transport(settings, sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    def build(upstream, custom_settings=None):
        client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return RetryingTransport(custom_settings or settings, client=client, sleep=fake_sleep)

    return build
