from dataclasses import dataclass, field
from typing import Literal

from courtrecords.models.search import ProviderId

PartyRole = Literal["plaintiff", "defendant", "petitioner", "respondent"]

PARTY_ROLES: frozenset[str] = frozenset({"plaintiff", "defendant", "petitioner", "respondent"})


@dataclass(frozen=True)
class Party:
    name: str
    role: PartyRole


@dataclass(frozen=True)
class Advocate:
    name: str
    bar_number: str = ""
    phone: str = ""
    email: str = ""
    side: str = ""  # petitioner / respondent when the provider says so


@dataclass(frozen=True)
class Judge:
    name: str
    designation: str = ""
    court: str = ""


@dataclass(frozen=True)
class Hearing:
    date: str
    purpose: str = ""
    judge: str = ""
    next_date: str = ""
    url: str = ""


@dataclass(frozen=True)
class Order:
    ordinal: int
    name: str = ""
    date: str = ""
    url: str = ""


@dataclass(frozen=True)
class ActsAndSections:
    acts: str = ""
    sections: str = ""


@dataclass(frozen=True)
class CaseDetails:
    subject_matter: str = ""
    description: str = ""
    relief_sought: str = ""
    value: float | None = None
    jurisdiction: str = ""


@dataclass(frozen=True)
class CanonicalCaseRecord:
    """One case, in the same shape whichever provider it came from.

    Dates are ISO ``YYYY-MM-DD`` strings or ``""``. Sequence fields are
    always tuples, possibly empty.
    """
    reference_code: str = ""
    case_number: str = ""
    filing_number: str = ""
    registration_number: str = ""
    title: str = ""
    court_name: str = ""
    court_location: str = ""
    hall: str = ""
    case_type: str = ""
    case_status: str = ""
    nature_of_disposal: str = ""
    filing_date: str = ""
    last_hearing_date: str = ""
    next_hearing_date: str = ""
    registration_date: str = ""
    first_hearing_date: str = ""
    decision_date: str = ""
    parties: tuple[Party, ...] = ()
    advocates: tuple[Advocate, ...] = ()
    judges: tuple[Judge, ...] = ()
    hearing_history: tuple[Hearing, ...] = ()
    orders: tuple[Order, ...] = ()
    acts_and_sections: ActsAndSections = field(default_factory=ActsAndSections)
    case_details: CaseDetails = field(default_factory=CaseDetails)
    source: ProviderId | None = None

    @property
    def dedup_key(self) -> tuple[str, ...]:
        if self.reference_code:
            return (self.reference_code.upper(),)
        return (self.case_number, self.filing_number, self.title)

    def has_advocate(self, name: str) -> bool:
        """Case-insensitive substring match of ``name`` against advocate names."""
        needle = name.strip().casefold()
        if not needle:
            return False
        return any(needle in advocate.name.casefold() for advocate in self.advocates)
