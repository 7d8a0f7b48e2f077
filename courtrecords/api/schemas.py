from dataclasses import asdict
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from courtrecords.models.court_case import CanonicalCaseRecord
from courtrecords.models.outcomes import (
    AllProvidersExhausted,
    Attempt,
    CaseFound,
    CaseList,
    InvalidInput,
    Resolution,
)
from courtrecords.models.search import (
    DEFAULT_LIMIT,
    CourtTier,
    Pagination,
    SearchMode,
    SearchRequest,
    infer_court_tier,
)


class ResolveCaseQuery(BaseModel):
    mode: SearchMode
    # Left out: inferred from a reference code, else district
    tier: CourtTier | None = None
    # Types are checked by the validator so errors share one format
    identifiers: dict[str, Any] = Field(default_factory=dict)
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def to_request(self) -> SearchRequest:
        tier = self.tier
        if tier is None:
            reference_code = self.identifiers.get("reference_code")
            tier = infer_court_tier(reference_code) if isinstance(reference_code, str) else CourtTier.DISTRICT
        return SearchRequest(
            mode=self.mode,
            tier=tier,
            identifiers=self.identifiers,
            pagination=Pagination(limit=self.limit, offset=self.offset),
        )


def record_body(record: CanonicalCaseRecord) -> dict[str, Any]:
    return jsonable_encoder(asdict(record))


def attempt_body(attempt: Attempt) -> dict[str, Any]:
    body = {
        "provider": attempt.provider.value,
        "mode": attempt.mode.value,
        "outcome": attempt.outcome.kind,
        "fallback": attempt.fallback,
    }
    if attempt.outcome.kind != "success":
        body["cause"] = attempt.cause
    status = getattr(attempt.outcome, "status", None)
    if status is not None:
        body["status"] = status
    return body


def resolution_body(resolution: Resolution) -> dict[str, Any]:
    """JSON body for a resolution; the HTTP status is picked by the route."""
    if isinstance(resolution, InvalidInput):
        return {
            "success": False,
            "error": resolution.code,
            "field": resolution.field,
            "message": resolution.message,
        }

    attempts = [attempt_body(attempt) for attempt in resolution.attempts]
    if isinstance(resolution, CaseFound):
        return {"success": True, "case": record_body(resolution.record), "attempts": attempts}
    if isinstance(resolution, CaseList):
        return {
            "success": True,
            "cases": [record_body(record) for record in resolution.records],
            "total": resolution.total,
            "via_fallback": resolution.via_fallback,
            "attempts": attempts,
        }
    if isinstance(resolution, AllProvidersExhausted):
        return {
            "success": False,
            "error": "DEADLINE_EXCEEDED" if resolution.deadline_exceeded else "ALL_PROVIDERS_EXHAUSTED",
            "providers_attempted": [provider.value for provider in resolution.providers_attempted],
            "attempts": attempts,
        }
    raise TypeError(f"Unknown resolution: {resolution!r}")
