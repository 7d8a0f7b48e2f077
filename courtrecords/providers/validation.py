"""Input validation for case searches. Runs before any network call."""

import re
from collections.abc import Mapping

from courtrecords.models.outcomes import InvalidInput
from courtrecords.models.search import (
    MAX_LIMIT,
    PRIMARY_FIELDS,
    Pagination,
    SearchMode,
    SearchRequest,
    ValidatedRequest,
)

REFERENCE_CODE_PATTERN = re.compile(r"^[A-Za-z0-9-]{16}$")

CASE_NUMBER_FIELDS = ("case_type", "case_number", "year")
COURT_SCOPE_FIELDS = ("state_code", "district_code", "court_complex_id", "court_id")


def is_reference_code(value: object) -> bool:
    # fullmatch so a trailing newline is not accepted the way "$" would
    return isinstance(value, str) and REFERENCE_CODE_PATTERN.fullmatch(value) is not None


def _clean_identifiers(identifiers: Mapping[str, object]) -> tuple[dict[str, str], InvalidInput | None]:
    cleaned: dict[str, str] = {}
    for name, value in identifiers.items():
        if value is None:
            continue
        if not isinstance(value, str):
            return cleaned, InvalidInput(
                code="INVALID_FIELD_TYPE",
                field=name,
                message=f"{name} must be a string, got {type(value).__name__}",
            )
        if name == "reference_code":
            # kept verbatim; the format check decides
            cleaned[name] = value
            continue
        value = value.strip()
        if value:
            cleaned[name] = value
    return cleaned, None


def _missing(field: str) -> InvalidInput:
    return InvalidInput(
        code="MISSING_REQUIRED_FIELD",
        field=field,
        message=f"{field} is required",
    )


def _check_pagination(pagination: Pagination) -> InvalidInput | None:
    if not 1 <= pagination.limit <= MAX_LIMIT:
        return InvalidInput(
            code="INVALID_PAGINATION",
            field="limit",
            message=f"limit must be between 1 and {MAX_LIMIT}",
        )
    if pagination.offset < 0:
        return InvalidInput(
            code="INVALID_PAGINATION",
            field="offset",
            message="offset must not be negative",
        )
    return None


def validate(request: SearchRequest) -> ValidatedRequest | InvalidInput:
    """Check that the identifiers the chosen mode needs are present.

    Returns a ``ValidatedRequest`` or the first problem found as an
    ``InvalidInput``. Values are never coerced: ``year=2024`` is rejected,
    ``year="2024"`` is accepted.
    """
    identifiers, error = _clean_identifiers(request.identifiers)
    if error:
        return error

    error = _check_pagination(request.pagination)
    if error:
        return error

    mode = request.mode
    if mode is SearchMode.BY_REFERENCE_CODE:
        if not is_reference_code(identifiers.get("reference_code")):
            return InvalidInput(
                code="INVALID_REFERENCE_CODE",
                field="reference_code",
                message="Reference code must be exactly 16 characters: letters, digits and hyphens",
            )
    elif mode is SearchMode.BY_CASE_NUMBER:
        for name in CASE_NUMBER_FIELDS:
            if name not in identifiers:
                return _missing(name)
        if not any(name in identifiers for name in COURT_SCOPE_FIELDS):
            return InvalidInput(
                code="MISSING_REQUIRED_FIELD",
                field="court_scope",
                message="Provide one of: " + ", ".join(COURT_SCOPE_FIELDS),
            )
    else:
        required = PRIMARY_FIELDS[mode]
        if required not in identifiers:
            return _missing(required)

    return ValidatedRequest(
        mode=mode,
        tier=request.tier,
        identifiers=identifiers,
        pagination=request.pagination,
    )
