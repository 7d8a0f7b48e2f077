import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from bs4 import BeautifulSoup

from courtrecords.models.court_case import (
    PARTY_ROLES,
    ActsAndSections,
    Advocate,
    CanonicalCaseRecord,
    CaseDetails,
    Hearing,
    Judge,
    Order,
    Party,
    PartyRole,
)
from courtrecords.models.search import ProviderId
from courtrecords.providers.aliases import (
    ADVOCATE_ITEM_FIELDS,
    ALIAS_TABLES,
    JUDGE_ITEM_FIELDS,
    PARTY_ITEM_FIELDS,
    AliasTable,
    Paths,
)
from courtrecords.providers.validation import is_reference_code

logger = logging.getLogger(__name__)

# Providers send 1970-01-01 for "no date"
EPOCH = date(1970, 1, 1)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%d %B %Y",
    "%d %b %Y",
    "%d-%b-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
)

ORDINAL_SUFFIX = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)\b", re.IGNORECASE)
NUMBER = re.compile(r"-?\d[\d,]*(?:\.\d+)?")
VERSUS = re.compile(r"\s+(?:vs?\.?|versus)\s+", re.IGNORECASE)

OPPOSING_ROLES: dict[str, PartyRole] = {
    "plaintiff": "defendant",
    "defendant": "plaintiff",
    "petitioner": "respondent",
    "respondent": "petitioner",
}

ROLE_SYNONYMS: dict[str, PartyRole] = {
    "appellant": "petitioner",
    "applicant": "petitioner",
    "complainant": "plaintiff",
    "accused": "respondent",
    "opposite party": "respondent",
    "opponent": "respondent",
}


# -- primitive helpers -------------------------------------------------------


def lookup(data: Any, path: str) -> Any:
    """Follow a dotted path through nested dicts. Missing steps give None."""
    current = data
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def first(data: Any, paths: Paths) -> Any:
    for path in paths:
        value = lookup(data, path)
        if not _is_blank(value):
            return value
    return None


def as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def strip_markup(text: str) -> str:
    """Remove HTML tags and collapse whitespace.

    Case stages arrive as e.g. ``"Disposed<br><b>Date:</b> 12-01-2024"``;
    line breaks become spaces so words stay apart.
    """
    if not text:
        return ""
    if "<" in text or "&" in text:
        soup = BeautifulSoup(text, "lxml")
        for br in soup.find_all("br"):
            br.replace_with(" ")
        text = soup.get_text(separator=" ")
    return " ".join(text.split())


def _parse_date(raw: str) -> date | None:
    value = ORDINAL_SUFFIX.sub(r"\1", raw.strip())
    if not value:
        return None

    iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    return None


def normalize_date(value: Any) -> str:
    """ISO ``YYYY-MM-DD`` for anything date-like, ``""`` for unset or unparseable.

    The epoch (1970-01-01) is a "not set" marker and also yields ``""``.
    Numbers are read as Unix timestamps, in milliseconds when they are too
    large to be seconds.
    """
    if _is_blank(value) or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > 10**11 else value
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return ""
    elif isinstance(value, str):
        parsed = _parse_date(value)
    else:
        return ""

    if parsed is None or parsed == EPOCH:
        return ""
    return parsed.isoformat()


def _as_number(value: Any) -> float | None:
    """A finite float, or None. JSON NaN and Infinity count as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        # "Rs. 1,50,000": first number, Indian digit grouping allowed
        match = NUMBER.search(value)
        if match is None:
            return None
        number = float(match.group().replace(",", ""))
    else:
        return None
    return number if math.isfinite(number) else None


def _as_list(value: Any) -> list[Any]:
    if _is_blank(value):
        return []
    if isinstance(value, list):
        return value
    return [value]


# -- structured collections --------------------------------------------------


def _party_role(raw: Any, default: PartyRole) -> PartyRole:
    role = as_text(raw).lower()
    if role in PARTY_ROLES:
        return role  # type: ignore[return-value]
    return ROLE_SYNONYMS.get(role, default)


def _parties(data: Any, table: AliasTable) -> tuple[Party, ...]:
    parties: list[Party] = []
    for group in table.parties:
        value = first(data, group.paths)
        if isinstance(value, str):
            # "A vs B": first name takes the group role, the rest the other side
            names = [name.strip() for name in VERSUS.split(value) if name.strip()]
            for index, name in enumerate(names):
                role = group.role if index == 0 else OPPOSING_ROLES[group.role]
                parties.append(Party(name=name, role=role))
            continue
        if not isinstance(value, list):
            continue
        for item in value:
            if isinstance(item, Mapping):
                name = as_text(first(item, PARTY_ITEM_FIELDS["name"]))
                role = _party_role(first(item, PARTY_ITEM_FIELDS["role"]), group.role)
            else:
                name, role = as_text(item), group.role
            if name:
                parties.append(Party(name=name, role=role))
    return tuple(parties)


def _advocates(data: Any, table: AliasTable) -> tuple[Advocate, ...]:
    advocates: list[Advocate] = []
    for group in table.advocates:
        for item in _as_list(first(data, group.paths)):
            if isinstance(item, Mapping):
                advocate = Advocate(
                    name=as_text(first(item, ADVOCATE_ITEM_FIELDS["name"])),
                    bar_number=as_text(first(item, ADVOCATE_ITEM_FIELDS["bar_number"])),
                    phone=as_text(first(item, ADVOCATE_ITEM_FIELDS["phone"])),
                    email=as_text(first(item, ADVOCATE_ITEM_FIELDS["email"])),
                    side=as_text(first(item, ADVOCATE_ITEM_FIELDS["side"])).lower() or group.side,
                )
            else:
                advocate = Advocate(name=as_text(item), side=group.side)
            if advocate.name:
                advocates.append(advocate)
    return tuple(advocates)


def _judges(data: Any, table: AliasTable) -> tuple[Judge, ...]:
    judges: list[Judge] = []
    for item in _as_list(first(data, table.judges)):
        if isinstance(item, Mapping):
            judge = Judge(
                name=as_text(first(item, JUDGE_ITEM_FIELDS["name"])),
                designation=as_text(first(item, JUDGE_ITEM_FIELDS["designation"])),
                court=as_text(first(item, JUDGE_ITEM_FIELDS["court"])),
            )
        else:
            judge = Judge(name=as_text(item))
        if judge.name:
            judges.append(judge)
    return tuple(judges)


def _hearings(data: Any, table: AliasTable) -> tuple[Hearing, ...]:
    fields = table.hearing_fields
    hearings = []
    for item in _as_list(first(data, table.hearings)):
        if not isinstance(item, Mapping):
            continue
        hearings.append(Hearing(
            date=normalize_date(first(item, fields["date"])),
            purpose=strip_markup(as_text(first(item, fields["purpose"]))),
            judge=as_text(first(item, fields["judge"])),
            next_date=normalize_date(first(item, fields["next_date"])),
            url=as_text(first(item, fields["url"])),
        ))
    return tuple(hearings)


def _orders(data: Any, table: AliasTable) -> tuple[Order, ...]:
    fields = table.order_fields
    orders = []
    for index, item in enumerate(_as_list(first(data, table.orders)), start=1):
        if not isinstance(item, Mapping):
            continue
        number = _as_number(first(item, fields["ordinal"]))
        orders.append(Order(
            ordinal=int(number) if number else index,
            name=as_text(first(item, fields["name"])),
            date=normalize_date(first(item, fields["date"])),
            url=as_text(first(item, fields["url"])),
        ))
    return tuple(orders)


def _acts_and_sections(data: Any, table: AliasTable) -> ActsAndSections:
    container = first(data, table.acts_containers)
    if not isinstance(container, Mapping):
        return ActsAndSections()
    return ActsAndSections(
        acts=as_text(first(container, table.acts_fields["acts"])),
        sections=as_text(first(container, table.acts_fields["sections"])),
    )


def _case_details(data: Any, table: AliasTable) -> CaseDetails:
    details = table.details
    return CaseDetails(
        subject_matter=as_text(first(data, details["subject_matter"])),
        description=as_text(first(data, details["description"])),
        relief_sought=as_text(first(data, details["relief_sought"])),
        value=_as_number(first(data, details["value"])),
        jurisdiction=as_text(first(data, details["jurisdiction"])),
    )


# -- entry points ------------------------------------------------------------


def unwrap(raw: Any, table: AliasTable) -> Any:
    """Return the object that actually holds the case fields."""
    data = raw
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, Mapping):
        for key in table.envelopes:
            inner = data.get(key)
            if isinstance(inner, Mapping) and inner:
                return inner
    return data


def is_case_payload(provider: ProviderId, raw: Any) -> bool:
    table = ALIAS_TABLES[provider]
    data = unwrap(raw, table)
    if not isinstance(data, Mapping):
        return False
    return first(data, table.markers) is not None


def _reference_code(data: Any, table: AliasTable, requested: str) -> str:
    candidate = as_text(first(data, table.reference_codes))
    if is_reference_code(candidate):
        return candidate
    if candidate:
        logger.debug(f"Dropping malformed reference code {candidate!r}")
    if is_reference_code(requested):
        return requested
    return ""


def normalize(provider: ProviderId, raw: Any, requested_identifier: str = "") -> CanonicalCaseRecord:
    """Map one provider payload onto a ``CanonicalCaseRecord``.

    ``requested_identifier`` fills in the reference code when the payload
    leaves it out and the caller looked the case up by that code. Missing
    fields become empty strings, empty tuples or ``None`` for the value.
    """
    table = ALIAS_TABLES[provider]
    data = unwrap(raw, table)
    if not isinstance(data, Mapping):
        data = {}

    scalars = {name: as_text(first(data, paths)) for name, paths in table.scalars.items()}
    dates = {name: normalize_date(first(data, paths)) for name, paths in table.dates.items()}
    markup = {name: strip_markup(as_text(first(data, paths))) for name, paths in table.markup.items()}

    return CanonicalCaseRecord(
        reference_code=_reference_code(data, table, requested_identifier),
        **scalars,
        **markup,
        **dates,
        parties=_parties(data, table),
        advocates=_advocates(data, table),
        judges=_judges(data, table),
        hearing_history=_hearings(data, table),
        orders=_orders(data, table),
        acts_and_sections=_acts_and_sections(data, table),
        case_details=_case_details(data, table),
        source=provider,
    )
