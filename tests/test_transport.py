"""Tests for the retrying HTTP transport."""

import json

import httpx
import pytest

from courtrecords.models.search import CourtTier, ProviderId, SearchMode, ValidatedRequest
from courtrecords.providers.endpoints import resolve
from courtrecords.providers.transport import TransportFailure, is_retriable_status

from conftest import KLEOPATRA_HOST, FakeUpstream


def test_retriable_statuses():
    assert is_retriable_status(429)
    assert is_retriable_status(500)
    assert is_retriable_status(503)
    assert not is_retriable_status(404)
    assert not is_retriable_status(400)


@pytest.mark.asyncio
async def test_backs_off_exponentially_then_gives_up(make_transport, sleeps):
    upstream = FakeUpstream(**{KLEOPATRA_HOST: lambda request: httpx.Response(500)})
    transport = make_transport(upstream)

    with pytest.raises(TransportFailure) as exc_info:
        await transport.request(ProviderId.KLEOPATRA, "POST", "/api/core/live/district-court/case", timeout=5)

    assert exc_info.value.transient
    assert exc_info.value.status == 500
    # one try plus three retries
    assert upstream.calls[KLEOPATRA_HOST] == 4
    assert sleeps == pytest.approx([0.3, 0.6, 1.2])
    assert sleeps == sorted(sleeps)
    await transport.close()


@pytest.mark.asyncio
async def test_recovers_after_rate_limit(make_transport, sleeps):
    responses = iter([
        httpx.Response(429),
        httpx.Response(200, json={"cnr": "KABC010153302024"}),
    ])
    upstream = FakeUpstream(**{KLEOPATRA_HOST: lambda request: next(responses)})
    transport = make_transport(upstream)

    response = await transport.request(ProviderId.KLEOPATRA, "GET", "/x", timeout=5)

    assert response.status == 200
    assert response.payload == {"cnr": "KABC010153302024"}
    assert sleeps == pytest.approx([0.3])


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(make_transport, sleeps):
    upstream = FakeUpstream(**{KLEOPATRA_HOST: lambda request: httpx.Response(404)})
    transport = make_transport(upstream)

    with pytest.raises(TransportFailure) as exc_info:
        await transport.request(ProviderId.KLEOPATRA, "GET", "/missing", timeout=5)

    assert not exc_info.value.transient
    assert exc_info.value.status == 404
    assert upstream.calls[KLEOPATRA_HOST] == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_timeouts_are_retried(make_transport, sleeps):
    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    upstream = FakeUpstream(**{KLEOPATRA_HOST: timeout})
    transport = make_transport(upstream)

    with pytest.raises(TransportFailure) as exc_info:
        await transport.request(ProviderId.KLEOPATRA, "GET", "/slow", timeout=5)

    assert exc_info.value.transient
    assert upstream.calls[KLEOPATRA_HOST] == 4


@pytest.mark.asyncio
async def test_sends_bearer_credential_and_json_body(make_transport):
    upstream = FakeUpstream(**{KLEOPATRA_HOST: lambda request: httpx.Response(200, json={})})
    transport = make_transport(upstream)
    request = ValidatedRequest(
        mode=SearchMode.BY_REFERENCE_CODE,
        tier=CourtTier.DISTRICT,
        identifiers={"reference_code": "KABC010153302024"},
    )
    spec = resolve(ProviderId.KLEOPATRA, CourtTier.DISTRICT, SearchMode.BY_REFERENCE_CODE)

    await transport.send(ProviderId.KLEOPATRA, spec, request, timeout=5)

    sent = upstream.requests[0]
    assert sent.headers["Authorization"] == "Bearer test-key"
    assert sent.url.path == "/api/core/live/district-court/case"
    assert json.loads(sent.content) == {"cnr": "KABC010153302024"}


@pytest.mark.asyncio
async def test_non_json_body_gives_no_payload(make_transport):
    upstream = FakeUpstream(**{KLEOPATRA_HOST: lambda request: httpx.Response(200, text="<html>maintenance</html>")})
    transport = make_transport(upstream)

    response = await transport.request(ProviderId.KLEOPATRA, "GET", "/", timeout=5)

    assert response.payload is None
    assert "maintenance" in response.text
