"""Tests for court hierarchy lookups."""

import httpx
import pytest

from courtrecords.providers.reference import Place, ReferenceDataClient, parse_places
from courtrecords.providers.transport import TransportFailure

from conftest import PHOENIX_HOST, FakeUpstream


def _phoenix(request: httpx.Request):
    path = request.url.path
    params = request.url.params
    if path == "/states":
        return httpx.Response(200, json=[{"code": "KA", "name": "Karnataka"}, {"code": "MH", "name": "Maharashtra"}])
    if path == "/districts" and params.get("stateCode") == "KA":
        return httpx.Response(200, json={"data": [{"districtCode": "19", "districtName": "Bengaluru Urban"}]})
    if path == "/court-complexes":
        return httpx.Response(500)
    if path == "/courts" and params.get("courtComplexId") == "1150":
        return httpx.Response(200, json={"courts": [{"id": 3, "courtName": "City Civil Court"}]})
    return httpx.Response(404)


def test_parse_places_reads_known_shapes():
    assert parse_places([{"id": 1, "name": "A"}], "states") == (Place("1", "A"),)
    assert parse_places({"states": [{"stateCode": "KA"}]}, "states") == (Place("KA", "KA"),)
    assert parse_places({"unexpected": True}, "states") == ()
    assert parse_places([{"name": "no code"}, "junk"], "states") == ()


@pytest.mark.asyncio
async def test_lookups(make_transport, settings):
    client = ReferenceDataClient(settings, make_transport(FakeUpstream(**{PHOENIX_HOST: _phoenix})))

    assert [p.code for p in await client.states()] == ["KA", "MH"]
    assert await client.districts("KA") == (Place("19", "Bengaluru Urban"),)
    assert await client.courts("1150") == (Place("3", "City Civil Court"),)


@pytest.mark.asyncio
async def test_lookups_need_a_parent_code(make_transport, settings):
    client = ReferenceDataClient(settings, make_transport(FakeUpstream()))

    with pytest.raises(ValueError):
        await client.districts("")


@pytest.mark.asyncio
async def test_failed_lookup_raises(make_transport, settings):
    client = ReferenceDataClient(settings, make_transport(FakeUpstream(**{PHOENIX_HOST: _phoenix})))

    with pytest.raises(TransportFailure):
        await client.complexes("19")


@pytest.mark.asyncio
async def test_load_filters_keeps_levels_that_loaded(make_transport, settings):
    upstream = FakeUpstream(**{PHOENIX_HOST: _phoenix})
    client = ReferenceDataClient(settings, make_transport(upstream))

    filters = await client.load_filters(state_code="KA", district_code="19", complex_id="1150")

    assert len(filters.states) == 2
    assert filters.districts == (Place("19", "Bengaluru Urban"),)
    assert filters.complexes == ()
    assert "complexes" in filters.errors
    assert filters.courts == (Place("3", "City Civil Court"),)


@pytest.mark.asyncio
async def test_load_filters_only_fetches_levels_with_a_parent(make_transport, settings):
    upstream = FakeUpstream(**{PHOENIX_HOST: _phoenix})
    client = ReferenceDataClient(settings, make_transport(upstream))

    filters = await client.load_filters()

    assert len(filters.states) == 2
    assert filters.districts == ()
    assert upstream.calls[PHOENIX_HOST] == 1
