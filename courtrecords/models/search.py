from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class CourtTier(str, Enum):
    DISTRICT = "district"
    HIGH = "high"
    SUPREME = "supreme"
    TRIBUNAL = "nclt"
    ADMINISTRATIVE_TRIBUNAL = "cat"
    CONSUMER_FORUM = "consumer"


class SearchMode(str, Enum):
    BY_REFERENCE_CODE = "reference_code"
    BY_CASE_NUMBER = "case_number"
    BY_FILING_NUMBER = "filing_number"
    BY_DIARY_NUMBER = "diary_number"
    BY_PARTY_NAME = "party_name"
    BY_ADVOCATE_NAME = "advocate_name"
    BY_ADVOCATE_NUMBER = "advocate_number"

    @property
    def returns_list(self) -> bool:
        """Every mode except a reference-code lookup can match several cases."""
        return self is not SearchMode.BY_REFERENCE_CODE


class ProviderId(str, Enum):
    KLEOPATRA = "kleopatra"
    ECOURTS_V17 = "ecourts_v17"
    PHOENIX = "phoenix"
    NAPIX = "napix"
    ECOURTS_PORTAL = "ecourts_portal"


TIER_DISPLAY_NAMES: dict[CourtTier, str] = {
    CourtTier.DISTRICT: "District Court",
    CourtTier.HIGH: "High Court",
    CourtTier.SUPREME: "Supreme Court",
    CourtTier.TRIBUNAL: "National Company Law Tribunal",
    CourtTier.ADMINISTRATIVE_TRIBUNAL: "Central Administrative Tribunal",
    CourtTier.CONSUMER_FORUM: "Consumer Forum",
}

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    limit: int = DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class SearchRequest:
    """A caller's search as received, before validation."""
    mode: SearchMode
    tier: CourtTier
    identifiers: Mapping[str, object] = field(default_factory=dict)
    pagination: Pagination = field(default_factory=Pagination)


@dataclass(frozen=True)
class ValidatedRequest:
    """A search whose required identifiers are known to be present.

    Only the validator builds these. Identifiers are read-only and never
    contain blank values.
    """
    mode: SearchMode
    tier: CourtTier
    identifiers: Mapping[str, str]
    pagination: Pagination = field(default_factory=Pagination)

    def __post_init__(self) -> None:
        if not isinstance(self.identifiers, MappingProxyType):
            object.__setattr__(self, "identifiers", MappingProxyType(dict(self.identifiers)))

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.identifiers.get(name, default)

    @property
    def primary_identifier(self) -> str:
        """The identifier value the search is keyed on (e.g. the CNR or party name)."""
        return self.identifiers.get(PRIMARY_FIELDS[self.mode], "")

    def with_mode(self, mode: SearchMode, **identifiers: str) -> "ValidatedRequest":
        """Copy of this request under another mode, with extra identifiers merged in."""
        merged = dict(self.identifiers)
        merged.update(identifiers)
        return ValidatedRequest(
            mode=mode,
            tier=self.tier,
            identifiers=merged,
            pagination=self.pagination,
        )


PRIMARY_FIELDS: dict[SearchMode, str] = {
    SearchMode.BY_REFERENCE_CODE: "reference_code",
    SearchMode.BY_CASE_NUMBER: "case_number",
    SearchMode.BY_FILING_NUMBER: "filing_number",
    SearchMode.BY_DIARY_NUMBER: "diary_number",
    SearchMode.BY_PARTY_NAME: "party_name",
    SearchMode.BY_ADVOCATE_NAME: "advocate_name",
    SearchMode.BY_ADVOCATE_NUMBER: "advocate_number",
}


def infer_court_tier(reference_code: str) -> CourtTier:
    """Guess the court tier from a CNR.

    CNRs embed an establishment code, e.g. ``KAHC`` for the Karnataka High
    Court. This is a heuristic: anything unrecognized is a district case.
    """
    code = reference_code.upper()
    if "HC" in code:
        return CourtTier.HIGH
    if "NCLT" in code or "NCLAT" in code:
        return CourtTier.TRIBUNAL
    if "SC" in code:
        return CourtTier.SUPREME
    if "CF" in code or "CONSUMER" in code:
        return CourtTier.CONSUMER_FORUM
    return CourtTier.DISTRICT
