"""Which providers to try, in which order, for each tier and search mode."""

from collections.abc import Mapping
from types import MappingProxyType

from courtrecords.models.search import CourtTier, ProviderId, SearchMode

ProviderPolicy = Mapping[tuple[CourtTier, SearchMode], tuple[ProviderId, ...]]

_MODE_ORDER: dict[SearchMode, tuple[ProviderId, ...]] = {
    SearchMode.BY_REFERENCE_CODE: (
        ProviderId.KLEOPATRA,
        ProviderId.NAPIX,
        ProviderId.ECOURTS_V17,
        ProviderId.ECOURTS_PORTAL,
    ),
    SearchMode.BY_CASE_NUMBER: (ProviderId.KLEOPATRA, ProviderId.ECOURTS_V17),
    SearchMode.BY_FILING_NUMBER: (ProviderId.KLEOPATRA, ProviderId.ECOURTS_V17),
    SearchMode.BY_DIARY_NUMBER: (ProviderId.KLEOPATRA,),
    SearchMode.BY_PARTY_NAME: (ProviderId.KLEOPATRA, ProviderId.ECOURTS_V17),
    SearchMode.BY_ADVOCATE_NAME: (ProviderId.ECOURTS_V17, ProviderId.KLEOPATRA, ProviderId.PHOENIX),
    SearchMode.BY_ADVOCATE_NUMBER: (ProviderId.ECOURTS_V17, ProviderId.KLEOPATRA, ProviderId.PHOENIX),
}

DEFAULT_POLICY: ProviderPolicy = MappingProxyType({
    (tier, mode): providers
    for tier in CourtTier
    for mode, providers in _MODE_ORDER.items()
})


def providers_for(policy: ProviderPolicy, tier: CourtTier, mode: SearchMode) -> tuple[ProviderId, ...]:
    return policy.get((tier, mode), ())
