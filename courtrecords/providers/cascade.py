import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from courtrecords.config import Settings, providers_in_use
from courtrecords.models.court_case import CanonicalCaseRecord
from courtrecords.models.outcomes import (
    AllProvidersExhausted,
    Attempt,
    AttemptOutcome,
    CaseFound,
    CaseList,
    Empty,
    InvalidInput,
    PermanentFailure,
    Resolution,
    Success,
    TransientFailure,
    Unsupported,
)
from courtrecords.models.search import (
    MAX_LIMIT,
    CourtTier,
    Pagination,
    ProviderId,
    SearchMode,
    SearchRequest,
    ValidatedRequest,
)
from courtrecords.providers.endpoints import EndpointSpec, NotSupported, resolve
from courtrecords.providers.normalizer import is_case_payload, normalize
from courtrecords.providers.policy import DEFAULT_POLICY, ProviderPolicy, providers_for
from courtrecords.providers.results import LIST_ENVELOPES, aggregate
from courtrecords.providers.transport import RetryingTransport, TransportFailure
from courtrecords.providers.validation import validate

logger = logging.getLogger(__name__)


def _is_blank_payload(payload: Any) -> bool:
    """An answer that plainly says "nothing here": {}, [] or {"data": null}."""
    if payload in ({}, []):
        return True
    if isinstance(payload, Mapping):
        return all(key in LIST_ENVELOPES and payload[key] in (None, {}, []) for key in payload)
    return False


class AdvocateViaPartyFallback:
    """Cross-mode fallback for district-court advocate searches.

    District advocate endpoints are the least reliable ones. When every
    provider comes back empty or failed, the advocate name is searched as a
    party name instead (advocates are frequently listed among the parties on
    the upstream side) and only hits whose advocate list contains the
    queried name are kept. Exactly one party-name call is made.
    """

    def __init__(self, policy: ProviderPolicy) -> None:
        self.policy = policy

    def applies(self, request: ValidatedRequest) -> bool:
        return request.mode is SearchMode.BY_ADVOCATE_NAME and request.tier is CourtTier.DISTRICT

    def party_request(self, request: ValidatedRequest) -> ValidatedRequest:
        # Fetch a full page so filtering happens before the caller's paging
        party = request.with_mode(SearchMode.BY_PARTY_NAME, party_name=request.primary_identifier)
        return ValidatedRequest(
            mode=party.mode,
            tier=party.tier,
            identifiers=party.identifiers,
            pagination=Pagination(limit=MAX_LIMIT, offset=0),
        )

    def provider(self, tier: CourtTier) -> tuple[ProviderId, EndpointSpec] | None:
        for provider in providers_for(self.policy, tier, SearchMode.BY_PARTY_NAME):
            spec = resolve(provider, tier, SearchMode.BY_PARTY_NAME)
            if isinstance(spec, EndpointSpec):
                return provider, spec
        return None

    @staticmethod
    def keep_matching(
        records: tuple[CanonicalCaseRecord, ...],
        advocate_name: str,
        pagination: Pagination,
    ) -> tuple[tuple[CanonicalCaseRecord, ...], int]:
        matching = [record for record in records if record.has_advocate(advocate_name)]
        page = matching[pagination.offset:pagination.offset + pagination.limit]
        return tuple(page), len(matching)


@dataclass(frozen=True)
class _AttemptResult:
    attempt: Attempt
    deadline_exceeded: bool = False


class CaseResolver:
    """Resolves case searches against upstream providers, one at a time.

    Providers for a (tier, mode) are tried strictly in policy order and the
    first success wins; the rest are never called. Failures, empty answers
    and unsupported combinations are recorded in the attempt trail and the
    cascade moves on.
    """

    def __init__(
        self,
        settings: Settings,
        transport: RetryingTransport | None = None,
        policy: ProviderPolicy = DEFAULT_POLICY,
    ) -> None:
        self.settings = settings
        self.transport = transport or RetryingTransport(settings)
        self.policy = policy
        self.advocate_fallback = AdvocateViaPartyFallback(policy)

    async def close(self) -> None:
        await self.transport.close()

    async def resolve_case(self, request: SearchRequest) -> Resolution:
        validated = validate(request)
        if isinstance(validated, InvalidInput):
            logger.info(f"Rejected {request.mode.value} search: {validated.code} ({validated.field})")
            return validated

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.request_deadline
        return await self._resolve(validated, deadline)

    async def _resolve(self, request: ValidatedRequest, deadline: float) -> Resolution:
        providers = providers_for(self.policy, request.tier, request.mode)
        timeout = self.settings.search_timeout if request.mode.returns_list else self.settings.lookup_timeout
        attempts: list[Attempt] = []

        for provider in providers:
            result = await self._attempt(provider, request, timeout, deadline)
            attempts.append(result.attempt)
            if result.deadline_exceeded:
                return AllProvidersExhausted(attempts=tuple(attempts), deadline_exceeded=True)

            outcome = result.attempt.outcome
            if isinstance(outcome, Success):
                if request.mode.returns_list:
                    return CaseList(records=outcome.records, total=outcome.total, attempts=tuple(attempts))
                return CaseFound(record=outcome.record, attempts=tuple(attempts))

        if self.advocate_fallback.applies(request):
            resolution = await self._run_advocate_fallback(request, attempts, deadline)
            if resolution is not None:
                return resolution

        if request.mode.returns_list and self._only_empty(attempts):
            logger.info(f"No {request.mode.value} matches in {request.tier.value} courts")
            return CaseList(records=(), total=0, attempts=tuple(attempts))

        logger.warning(
            f"All providers exhausted for {request.mode.value} in {request.tier.value} courts: "
            + "; ".join(f"{a.provider.value}={a.cause}" for a in attempts)
        )
        return AllProvidersExhausted(attempts=tuple(attempts))

    async def _run_advocate_fallback(
        self,
        request: ValidatedRequest,
        attempts: list[Attempt],
        deadline: float,
    ) -> Resolution | None:
        fallback = self.advocate_fallback
        target = fallback.provider(request.tier)
        if target is None:
            return None
        provider, _ = target

        advocate_name = request.primary_identifier
        logger.info(f"Advocate search found nothing, retrying {advocate_name!r} as a party name on {provider.value}")
        result = await self._attempt(
            provider,
            fallback.party_request(request),
            self.settings.search_timeout,
            deadline,
            fallback=True,
        )
        attempts.append(result.attempt)
        if result.deadline_exceeded:
            return AllProvidersExhausted(attempts=tuple(attempts), deadline_exceeded=True)

        outcome = result.attempt.outcome
        if not isinstance(outcome, Success):
            return None

        records, total = fallback.keep_matching(outcome.records, advocate_name, request.pagination)
        logger.info(f"Party fallback kept {total} of {len(outcome.records)} records for {advocate_name!r}")
        return CaseList(records=records, total=total, attempts=tuple(attempts), via_fallback=True)

    @staticmethod
    def _only_empty(attempts: list[Attempt]) -> bool:
        """True when providers answered but had no matches, and none failed."""
        answered = False
        for attempt in attempts:
            outcome = attempt.outcome
            if isinstance(outcome, Empty) and not outcome.unrecognized:
                answered = True
            elif not isinstance(outcome, Unsupported):
                return False
        return answered

    async def _attempt(
        self,
        provider: ProviderId,
        request: ValidatedRequest,
        timeout: float,
        deadline: float,
        fallback: bool = False,
    ) -> _AttemptResult:
        spec = resolve(provider, request.tier, request.mode)
        if isinstance(spec, NotSupported):
            outcome: AttemptOutcome = Unsupported(reason=spec.reason, not_implemented=spec.not_implemented)
            return self._record(provider, request, outcome, fallback)

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            outcome = TransientFailure(cause="request deadline exceeded")
            return _AttemptResult(self._record(provider, request, outcome, fallback).attempt, True)

        try:
            response = await asyncio.wait_for(
                self.transport.send(provider, spec, request, timeout),
                timeout=remaining,
            )
        except asyncio.TimeoutError:
            outcome = TransientFailure(cause="request deadline exceeded")
            return _AttemptResult(self._record(provider, request, outcome, fallback).attempt, True)
        except TransportFailure as e:
            if e.transient:
                outcome = TransientFailure(cause=str(e), status=e.status)
            else:
                outcome = PermanentFailure(cause=str(e), status=e.status)
        except httpx.HTTPError as e:
            outcome = TransientFailure(cause=f"{provider.value}: {e}")
        else:
            outcome = self._classify(provider, request, response.payload)

        return self._record(provider, request, outcome, fallback)

    def _classify(self, provider: ProviderId, request: ValidatedRequest, payload: Any) -> AttemptOutcome:
        """Turn a decoded response into an outcome. Payloads that break normalization are parse errors."""
        try:
            return self._parse(provider, request, payload)
        except (ValueError, TypeError) as e:
            logger.warning(f"Parse error: could not normalize {request.mode.value} response from {provider.value}: {e}")
            return Empty(unrecognized=True)

    def _parse(self, provider: ProviderId, request: ValidatedRequest, payload: Any) -> AttemptOutcome:
        if request.mode.returns_list:
            aggregated = aggregate(provider, payload, request.pagination)
            if aggregated is None:
                logger.warning(f"Parse error: unrecognized {request.mode.value} response from {provider.value}")
                return Empty(unrecognized=True)
            if not aggregated.records and aggregated.total == 0:
                return Empty()
            return Success(records=aggregated.records, total=aggregated.total)

        if is_case_payload(provider, payload):
            record = normalize(provider, payload, request.primary_identifier)
            return Success(records=(record,), total=1)
        if _is_blank_payload(payload):
            return Empty()
        logger.warning(f"Parse error: unrecognized case response from {provider.value}")
        return Empty(unrecognized=True)

    @staticmethod
    def _record(
        provider: ProviderId,
        request: ValidatedRequest,
        outcome: AttemptOutcome,
        fallback: bool,
    ) -> _AttemptResult:
        label = " (fallback)" if fallback else ""
        logger.info(
            f"{provider.value} {request.tier.value}/{request.mode.value}{label}: {outcome.kind}"
        )
        attempt = Attempt(provider=provider, mode=request.mode, outcome=outcome, fallback=fallback)
        return _AttemptResult(attempt)

    async def check_providers(self) -> dict[ProviderId, str | None]:
        """Call the health endpoint of every provider the cascade can call, concurrently.

        Placeholder integrations are skipped so no credential goes to a host
        that is never used. Maps each provider to None when it answered, or to
        the error.
        """
        providers = [provider for provider in providers_in_use() if provider in self.settings.providers]
        checks = [
            self.transport.request(provider, "GET", "/health", timeout=self.settings.reference_timeout)
            for provider in providers
        ]
        results = await asyncio.gather(*checks, return_exceptions=True)

        status: dict[ProviderId, str | None] = {}
        for provider, result in zip(providers, results):
            status[provider] = str(result) if isinstance(result, Exception) else None
        return status
