"""Routing table from (provider, court tier, search mode) to a request shape.

Adding a combination is one entry in ``_TABLE``; lookups never branch on
provider or tier. The table is frozen at import time.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal
from urllib.parse import quote

from courtrecords.models.search import CourtTier, ProviderId, SearchMode, ValidatedRequest

BodyBuilder = Callable[[ValidatedRequest], dict[str, Any]]


@dataclass(frozen=True)
class EndpointSpec:
    method: Literal["GET", "POST"]
    path_template: str
    build_body: BodyBuilder

    def path(self, request: ValidatedRequest) -> str:
        """Fill ``{identifier}`` placeholders, URL-quoted."""
        values = {name: quote(value, safe="") for name, value in request.identifiers.items()}
        return self.path_template.format_map(values)


@dataclass(frozen=True)
class NotSupported:
    reason: str
    not_implemented: bool = False


@dataclass(frozen=True)
class Fixed:
    """A constant body value, as opposed to an identifier name."""
    value: Any


def fields(**mapping: Any) -> BodyBuilder:
    """Build a body builder that copies identifiers under provider key names.

    Each value is an identifier name, an ``(identifier, default)`` pair, a
    ``Fixed`` constant, or a nested builder. Keys whose value is absent are
    left out of the body.
    """

    def build(request: ValidatedRequest) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for key, source in mapping.items():
            if isinstance(source, Fixed):
                value = source.value
            elif isinstance(source, tuple):
                name, default = source
                value = request.get(name, default)
            elif callable(source):
                value = source(request) or None
            else:
                value = request.get(source)
            if value is not None:
                body[key] = value
        return body

    return build


def _pagination(request: ValidatedRequest) -> dict[str, int]:
    return {"limit": request.pagination.limit, "offset": request.pagination.offset}


def _with_pagination(builder: BodyBuilder) -> BodyBuilder:
    def build(request: ValidatedRequest) -> dict[str, Any]:
        body = builder(request)
        body.update(_pagination(request))
        return body

    return build


# -- Kleopatra: one live endpoint family per tier ---------------------------

KLEOPATRA_LIVE = "/api/core/live"

# The tribunals use their full names for searches but a short slug for CNR lookups
_KLEOPATRA_CASE_SLUGS = {
    CourtTier.DISTRICT: "district-court",
    CourtTier.HIGH: "high-court",
    CourtTier.SUPREME: "supreme-court",
    CourtTier.TRIBUNAL: "nclt",
    CourtTier.CONSUMER_FORUM: "consumer-forum",
}
_KLEOPATRA_SEARCH_SLUGS = {
    CourtTier.DISTRICT: "district-court",
    CourtTier.HIGH: "high-court",
    CourtTier.SUPREME: "supreme-court",
    CourtTier.TRIBUNAL: "national-company-law-tribunal",
    CourtTier.ADMINISTRATIVE_TRIBUNAL: "central-administrative-tribunal",
    CourtTier.CONSUMER_FORUM: "consumer-forum",
}


def _kleopatra(slug: str, suffix: str, builder: BodyBuilder) -> EndpointSpec:
    return EndpointSpec("POST", f"{KLEOPATRA_LIVE}/{slug}/{suffix}", builder)


_STAGE = ("stage", "BOTH")

_kleopatra_entries: dict[tuple[CourtTier, SearchMode], EndpointSpec] = {}

for _tier, _slug in _KLEOPATRA_CASE_SLUGS.items():
    _kleopatra_entries[_tier, SearchMode.BY_REFERENCE_CODE] = _kleopatra(
        _slug, "case", fields(cnr="reference_code"),
    )

_s = _KLEOPATRA_SEARCH_SLUGS
_kleopatra_entries.update({
    # case number
    (CourtTier.DISTRICT, SearchMode.BY_CASE_NUMBER): _kleopatra(
        _s[CourtTier.DISTRICT], "case",
        fields(
            caseNumber="case_number", caseYear="year", caseType="case_type",
            stateId="state_code", districtId="district_code",
            complexId="court_complex_id", courtId="court_id",
        ),
    ),
    (CourtTier.HIGH, SearchMode.BY_CASE_NUMBER): _kleopatra(
        _s[CourtTier.HIGH], "case",
        fields(caseNumber="case_number", caseYear="year", caseType="case_type", benchId="bench_id"),
    ),
    (CourtTier.SUPREME, SearchMode.BY_CASE_NUMBER): _kleopatra(
        _s[CourtTier.SUPREME], "case",
        fields(caseNumber="case_number", caseYear="year", caseType="case_type"),
    ),
    (CourtTier.TRIBUNAL, SearchMode.BY_CASE_NUMBER): _kleopatra(
        _s[CourtTier.TRIBUNAL], "case-number",
        fields(caseNumber="case_number", caseYear="year", benchId="bench_id", typeId="type_id"),
    ),
    (CourtTier.ADMINISTRATIVE_TRIBUNAL, SearchMode.BY_CASE_NUMBER): _kleopatra(
        _s[CourtTier.ADMINISTRATIVE_TRIBUNAL], "case-number",
        fields(caseNumber="case_number", caseYear="year", benchId="bench_id", typeId="type_id"),
    ),
    (CourtTier.CONSUMER_FORUM, SearchMode.BY_CASE_NUMBER): _kleopatra(
        _s[CourtTier.CONSUMER_FORUM], "case",
        fields(caseNumber="case_number", year="year", caseType="case_type", state="state_code"),
    ),
    # filing number
    (CourtTier.DISTRICT, SearchMode.BY_FILING_NUMBER): _kleopatra(
        _s[CourtTier.DISTRICT], "search/filing",
        fields(filingNumber="filing_number", filingYear="filing_year", districtId="district_code"),
    ),
    (CourtTier.HIGH, SearchMode.BY_FILING_NUMBER): _kleopatra(
        _s[CourtTier.HIGH], "search/filing",
        fields(filingNumber="filing_number", filingYear="filing_year", benchId="bench_id"),
    ),
    (CourtTier.TRIBUNAL, SearchMode.BY_FILING_NUMBER): _kleopatra(
        _s[CourtTier.TRIBUNAL], "filing-number",
        fields(filingNumber="filing_number", filingYear="filing_year"),
    ),
    (CourtTier.ADMINISTRATIVE_TRIBUNAL, SearchMode.BY_FILING_NUMBER): _kleopatra(
        _s[CourtTier.ADMINISTRATIVE_TRIBUNAL], "case-number",
        fields(caseNumber="filing_number", caseYear="filing_year", benchId="bench_id", typeId="type_id"),
    ),
    (CourtTier.CONSUMER_FORUM, SearchMode.BY_FILING_NUMBER): _kleopatra(
        _s[CourtTier.CONSUMER_FORUM], "case",
        fields(caseNumber="filing_number", year="filing_year"),
    ),
    # diary numbers only exist at the Supreme Court
    (CourtTier.SUPREME, SearchMode.BY_DIARY_NUMBER): _kleopatra(
        _s[CourtTier.SUPREME], "case",
        fields(diaryNumber="diary_number", year="year"),
    ),
    # party name
    (CourtTier.DISTRICT, SearchMode.BY_PARTY_NAME): _kleopatra(
        _s[CourtTier.DISTRICT], "search/party",
        fields(name="party_name", stage=_STAGE, year="year", districtId="district_code"),
    ),
    (CourtTier.HIGH, SearchMode.BY_PARTY_NAME): _kleopatra(
        _s[CourtTier.HIGH], "search/party",
        fields(name="party_name", stage=_STAGE, year="year", benchId="bench_id"),
    ),
    (CourtTier.SUPREME, SearchMode.BY_PARTY_NAME): _kleopatra(
        _s[CourtTier.SUPREME], "search/party",
        fields(name="party_name", stage=_STAGE, year="year", type=("party_type", "ANY")),
    ),
    (CourtTier.TRIBUNAL, SearchMode.BY_PARTY_NAME): _kleopatra(
        _s[CourtTier.TRIBUNAL], "search/party",
        fields(
            name="party_name", stage=_STAGE, year="year", benchId="bench_id",
            partyType=("party_type", "PETITIONER"),
        ),
    ),
    (CourtTier.ADMINISTRATIVE_TRIBUNAL, SearchMode.BY_PARTY_NAME): EndpointSpec(
        # CAT spells this one with a hyphen instead of a slash
        "POST",
        f"{KLEOPATRA_LIVE}/{_s[CourtTier.ADMINISTRATIVE_TRIBUNAL]}/search-party",
        fields(name="party_name", stage=_STAGE, year="year", benchId="bench_id", type=("party_type", "BOTH")),
    ),
    (CourtTier.CONSUMER_FORUM, SearchMode.BY_PARTY_NAME): _kleopatra(
        _s[CourtTier.CONSUMER_FORUM], "search/party",
        fields(name="party_name", stage=_STAGE, year="year"),
    ),
    # advocates: district court only
    (CourtTier.DISTRICT, SearchMode.BY_ADVOCATE_NAME): _kleopatra(
        _s[CourtTier.DISTRICT], "search/advocate",
        fields(advocate=fields(name="advocate_name"), stage=_STAGE, districtId="district_code"),
    ),
    (CourtTier.DISTRICT, SearchMode.BY_ADVOCATE_NUMBER): _kleopatra(
        _s[CourtTier.DISTRICT], "search/advocate-number",
        fields(
            search=fields(State="state_code", number="advocate_number", year="year"),
            stage=_STAGE,
            districtId="district_code",
        ),
    ),
})


# -- eCourts v17 and Phoenix: tier is a body field, not a path segment --------

_BENCH_LEVELS = {
    CourtTier.DISTRICT: "DISTRICT",
    CourtTier.HIGH: "HIGH_COURT",
    CourtTier.SUPREME: "SUPREME",
    CourtTier.TRIBUNAL: "TRIBUNAL",
    CourtTier.ADMINISTRATIVE_TRIBUNAL: "TRIBUNAL",
    CourtTier.CONSUMER_FORUM: "TRIBUNAL",
}

_V17_SEARCH_MODES = {
    SearchMode.BY_CASE_NUMBER: "caseNumber",
    SearchMode.BY_FILING_NUMBER: "filingNumber",
    SearchMode.BY_PARTY_NAME: "partyName",
}


def _v17_search(tier: CourtTier, mode: SearchMode) -> EndpointSpec:
    return EndpointSpec(
        "POST",
        "/cases/search",
        _with_pagination(fields(
            mode=Fixed(_V17_SEARCH_MODES[mode]),
            benchLevel=Fixed(_BENCH_LEVELS[tier]),
            stateCode="state_code",
            districtCode="district_code",
            courtComplexId="court_complex_id",
            courtId="court_id",
            caseType="case_type",
            caseNumber="case_number",
            year="year",
            partyName="party_name",
            filingNumber="filing_number",
        )),
    )


def _advocate_search(path: str, tier: CourtTier, mode: SearchMode) -> EndpointSpec:
    if mode is SearchMode.BY_ADVOCATE_NAME:
        builder = fields(advocate_name="advocate_name", court_type=Fixed(tier.value), stage=_STAGE)
    else:
        builder = fields(
            advocate_number="advocate_number",
            state_code="state_code",
            year="year",
            court_type=Fixed(tier.value),
        )
    return EndpointSpec("POST", path, builder)


_ADVOCATE_MODES = (SearchMode.BY_ADVOCATE_NAME, SearchMode.BY_ADVOCATE_NUMBER)

_v17_entries: dict[tuple[CourtTier, SearchMode], EndpointSpec] = {}
_phoenix_entries: dict[tuple[CourtTier, SearchMode], EndpointSpec] = {}
_napix_entries: dict[tuple[CourtTier, SearchMode], EndpointSpec] = {}
_portal_entries: dict[tuple[CourtTier, SearchMode], NotSupported] = {}

for _tier in CourtTier:
    _v17_entries[_tier, SearchMode.BY_REFERENCE_CODE] = EndpointSpec(
        "GET", "/cases/by-cnr", fields(cnr="reference_code"),
    )
    for _mode in _V17_SEARCH_MODES:
        _v17_entries[_tier, _mode] = _v17_search(_tier, _mode)
    for _mode in _ADVOCATE_MODES:
        _v17_entries[_tier, _mode] = _advocate_search("/advocates/search", _tier, _mode)
        _phoenix_entries[_tier, _mode] = _advocate_search("/api/v1/advocates/search", _tier, _mode)
    _napix_entries[_tier, SearchMode.BY_REFERENCE_CODE] = EndpointSpec(
        "GET", "/cases/{reference_code}", fields(),
    )

# The public eCourts portals sit behind a CAPTCHA; the integration is a placeholder
for _tier in (CourtTier.DISTRICT, CourtTier.HIGH):
    for _mode in SearchMode:
        _portal_entries[_tier, _mode] = NotSupported(
            reason="eCourts portal scraping is not implemented (CAPTCHA protected)",
            not_implemented=True,
        )


def _flatten(
    provider: ProviderId,
    entries: Mapping[tuple[CourtTier, SearchMode], EndpointSpec | NotSupported],
) -> dict[tuple[ProviderId, CourtTier, SearchMode], EndpointSpec | NotSupported]:
    return {(provider, tier, mode): spec for (tier, mode), spec in entries.items()}


_TABLE: Mapping[tuple[ProviderId, CourtTier, SearchMode], EndpointSpec | NotSupported] = MappingProxyType({
    **_flatten(ProviderId.KLEOPATRA, _kleopatra_entries),
    **_flatten(ProviderId.ECOURTS_V17, _v17_entries),
    **_flatten(ProviderId.PHOENIX, _phoenix_entries),
    **_flatten(ProviderId.NAPIX, _napix_entries),
    **_flatten(ProviderId.ECOURTS_PORTAL, _portal_entries),
})


def resolve(provider: ProviderId, tier: CourtTier, mode: SearchMode) -> EndpointSpec | NotSupported:
    spec = _TABLE.get((provider, tier, mode))
    if spec is None:
        return NotSupported(reason=f"{provider.value} has no {mode.value} endpoint for {tier.value} courts")
    return spec


def supported_combinations() -> list[tuple[ProviderId, CourtTier, SearchMode]]:
    """All combinations with a usable endpoint, in table order."""
    return [key for key, spec in _TABLE.items() if isinstance(spec, EndpointSpec)]
