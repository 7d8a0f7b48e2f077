"""Outcome and resolution variants.

Each provider attempt produces exactly one ``AttemptOutcome`` value. The
orchestrator folds those into a ``Resolution`` for the caller. Callers only
ever see ``CaseFound``, ``CaseList``, ``InvalidInput`` or
``AllProvidersExhausted``; the per-attempt variants travel inside the
attempt trail for diagnosis.
"""

from dataclasses import dataclass
from typing import Literal, Union

from courtrecords.models.court_case import CanonicalCaseRecord
from courtrecords.models.search import ProviderId, SearchMode

InvalidInputCode = Literal[
    "INVALID_REFERENCE_CODE",
    "MISSING_REQUIRED_FIELD",
    "INVALID_FIELD_TYPE",
    "INVALID_PAGINATION",
]


# -- per-attempt outcomes ----------------------------------------------------


@dataclass(frozen=True)
class Success:
    records: tuple[CanonicalCaseRecord, ...]
    total: int

    kind = "success"

    @property
    def record(self) -> CanonicalCaseRecord:
        return self.records[0]


@dataclass(frozen=True)
class Empty:
    """The provider answered, but with nothing usable.

    ``unrecognized`` marks a payload that matched none of the provider's
    known shapes (a parse error) rather than a genuine "no matches".
    """
    unrecognized: bool = False

    kind = "empty"


@dataclass(frozen=True)
class TransientFailure:
    cause: str
    status: int | None = None

    kind = "transient_failure"


@dataclass(frozen=True)
class PermanentFailure:
    cause: str
    status: int | None = None

    kind = "permanent_failure"


@dataclass(frozen=True)
class Unsupported:
    reason: str
    not_implemented: bool = False

    kind = "unsupported"


AttemptOutcome = Union[Success, Empty, TransientFailure, PermanentFailure, Unsupported]


@dataclass(frozen=True)
class Attempt:
    provider: ProviderId
    mode: SearchMode
    outcome: AttemptOutcome
    fallback: bool = False

    @property
    def cause(self) -> str:
        """Human readable reason this attempt did not produce a result."""
        outcome = self.outcome
        if isinstance(outcome, (TransientFailure, PermanentFailure)):
            return outcome.cause
        if isinstance(outcome, Unsupported):
            return outcome.reason
        if isinstance(outcome, Empty):
            return "unrecognized response" if outcome.unrecognized else "no matching records"
        return ""


# -- caller-visible resolutions ---------------------------------------------


@dataclass(frozen=True)
class CaseFound:
    record: CanonicalCaseRecord
    attempts: tuple[Attempt, ...]

    success = True


@dataclass(frozen=True)
class CaseList:
    records: tuple[CanonicalCaseRecord, ...]
    total: int
    attempts: tuple[Attempt, ...]
    via_fallback: bool = False

    success = True


@dataclass(frozen=True)
class InvalidInput:
    code: InvalidInputCode
    field: str
    message: str

    success = False


@dataclass(frozen=True)
class AllProvidersExhausted:
    """No provider produced a result.

    ``attempts`` holds one entry per configured provider for the request's
    (tier, mode), followed by any cross-mode fallback attempts (marked
    ``fallback=True``). ``primary_attempts`` is the first part alone. After
    a deadline expiry the trail stops at the call that was in flight.
    """
    attempts: tuple[Attempt, ...]
    deadline_exceeded: bool = False

    success = False

    @property
    def primary_attempts(self) -> tuple[Attempt, ...]:
        return tuple(attempt for attempt in self.attempts if not attempt.fallback)

    @property
    def fallback_attempts(self) -> tuple[Attempt, ...]:
        return tuple(attempt for attempt in self.attempts if attempt.fallback)

    @property
    def providers_attempted(self) -> list[ProviderId]:
        return [attempt.provider for attempt in self.attempts]

    @property
    def last_causes(self) -> dict[ProviderId, str]:
        """Last recorded cause per provider, in attempt order."""
        causes: dict[ProviderId, str] = {}
        for attempt in self.attempts:
            causes[attempt.provider] = attempt.cause
        return causes


Resolution = Union[CaseFound, CaseList, InvalidInput, AllProvidersExhausted]
