from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from courtrecords.models.court_case import CanonicalCaseRecord
from courtrecords.models.search import Pagination, ProviderId
from courtrecords.providers.normalizer import is_case_payload, normalize

# Keys providers wrap result lists in, most common first
LIST_ENVELOPES = ("data", "cases", "results")


@dataclass(frozen=True)
class AggregatedList:
    records: tuple[CanonicalCaseRecord, ...]
    total: int


def extract_items(provider: ProviderId, raw: Any) -> tuple[list[Any], int | None] | None:
    """Pull the list of case payloads out of a search response.

    Returns ``(items, envelope_total)``, or None when the response has none
    of the shapes providers use. A single case object counts as one hit.
    """
    if isinstance(raw, list):
        return raw, None
    if not isinstance(raw, Mapping):
        return None

    total = raw.get("total")
    envelope_total = total if isinstance(total, int) and not isinstance(total, bool) else None

    for key in LIST_ENVELOPES:
        inner = raw.get(key)
        if isinstance(inner, list):
            return inner, envelope_total
        if isinstance(inner, Mapping):
            nested = extract_items(provider, inner)
            if nested is not None and nested[0]:
                items, nested_total = nested
                return items, envelope_total if envelope_total is not None else nested_total

    if is_case_payload(provider, raw):
        return [raw], None
    # {"cases": null} and friends: a valid answer with nothing in it
    if any(key in raw for key in LIST_ENVELOPES):
        return [], envelope_total
    return None


def dedupe(records: list[CanonicalCaseRecord]) -> list[CanonicalCaseRecord]:
    seen: set[tuple[str, ...]] = set()
    unique = []
    for record in records:
        key = record.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def aggregate(provider: ProviderId, raw: Any, pagination: Pagination) -> AggregatedList | None:
    """Normalize every case in a search response into canonical records.

    An empty list is a real answer ("no matches"); None means the response
    was not recognizable at all, including a list whose items are not cases
    (e.g. ``{"data": [{"message": "Session expired"}]}``). Stray non-case
    items next to real hits are dropped. When the provider reports its own
    ``total`` it has already paged the results; otherwise the page is cut
    here.
    """
    extracted = extract_items(provider, raw)
    if extracted is None:
        return None
    items, envelope_total = extracted

    cases = [item for item in items if isinstance(item, Mapping) and is_case_payload(provider, item)]
    if items and not cases:
        return None

    records = dedupe([normalize(provider, item) for item in cases])

    if envelope_total is not None:
        return AggregatedList(records=tuple(records), total=max(envelope_total, len(records)))

    page = records[pagination.offset:pagination.offset + pagination.limit]
    return AggregatedList(records=tuple(page), total=len(records))
