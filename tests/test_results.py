"""Tests for search result aggregation."""

import pytest

from courtrecords.models.search import Pagination, ProviderId
from courtrecords.providers.results import aggregate, extract_items


def _case(cnr, title="A vs B"):
    return {"cnr_number": cnr, "case_title": title}


@pytest.mark.parametrize("payload", [
    [_case("KABC010153302024")],
    {"data": [_case("KABC010153302024")]},
    {"cases": [_case("KABC010153302024")]},
    {"results": [_case("KABC010153302024")]},
    {"data": {"cases": [_case("KABC010153302024")]}},
    _case("KABC010153302024"),
])
def test_accepts_every_envelope_shape(payload):
    aggregated = aggregate(ProviderId.ECOURTS_V17, payload, Pagination())

    assert aggregated is not None
    assert [record.reference_code for record in aggregated.records] == ["KABC010153302024"]
    assert aggregated.total == 1


@pytest.mark.parametrize("payload", [[], {"data": []}, {"cases": None}, {"data": {"cases": []}}])
def test_empty_envelopes_are_valid_empty_answers(payload):
    aggregated = aggregate(ProviderId.ECOURTS_V17, payload, Pagination())

    assert aggregated is not None
    assert aggregated.records == ()
    assert aggregated.total == 0


@pytest.mark.parametrize("payload", [None, "oops", {"message": "Service unavailable"}])
def test_unrecognized_shapes(payload):
    assert extract_items(ProviderId.ECOURTS_V17, payload) is None
    assert aggregate(ProviderId.ECOURTS_V17, payload, Pagination()) is None


def test_duplicates_are_dropped():
    payload = [
        _case("KABC010153302024"),
        _case("kabc010153302024"),
        {"case_number": "12/2024", "case_title": "X vs Y"},
        {"case_number": "12/2024", "case_title": "X vs Y"},
    ]

    aggregated = aggregate(ProviderId.ECOURTS_V17, payload, Pagination())

    assert aggregated.total == 2


def test_pages_locally_without_provider_total():
    payload = [_case(f"KABC0101533020{n:02d}") for n in range(10)]

    aggregated = aggregate(ProviderId.ECOURTS_V17, payload, Pagination(limit=3, offset=6))

    assert [r.reference_code for r in aggregated.records] == [
        "KABC010153302006",
        "KABC010153302007",
        "KABC010153302008",
    ]
    assert aggregated.total == 10


def test_provider_total_is_kept():
    payload = {"total": 57, "data": [_case("KABC010153302024")]}

    aggregated = aggregate(ProviderId.ECOURTS_V17, payload, Pagination(limit=1))

    assert aggregated.total == 57
    assert len(aggregated.records) == 1


@pytest.mark.parametrize("payload", [
    {"data": [{"message": "Session expired"}]},
    {"data": [{"error": "quota exceeded"}]},
    [{"status": "maintenance"}, "junk"],
])
def test_lists_without_cases_are_unrecognized(payload):
    assert aggregate(ProviderId.KLEOPATRA, payload, Pagination()) is None


def test_stray_items_next_to_cases_are_dropped():
    payload = {"data": [_case("KABC010153302024"), {"message": "partial results"}]}

    aggregated = aggregate(ProviderId.ECOURTS_V17, payload, Pagination())

    assert [r.reference_code for r in aggregated.records] == ["KABC010153302024"]
    assert aggregated.total == 1
