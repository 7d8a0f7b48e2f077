"""Field alias tables, one per provider.

Each canonical field lists the dotted paths where a provider may put it,
most specific first. The normalizer takes the first non-empty hit.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from courtrecords.models.court_case import PartyRole
from courtrecords.models.search import ProviderId

Paths = tuple[str, ...]


@dataclass(frozen=True)
class PartyGroup:
    """Where a list of parties lives, and the role for bare name strings."""
    paths: Paths
    role: PartyRole


@dataclass(frozen=True)
class AdvocateGroup:
    paths: Paths
    side: str = ""


@dataclass(frozen=True)
class AliasTable:
    scalars: Mapping[str, Paths]
    dates: Mapping[str, Paths]
    markup: Mapping[str, Paths]  # free text that may carry HTML
    parties: tuple[PartyGroup, ...]
    advocates: tuple[AdvocateGroup, ...]
    judges: Paths
    hearings: Paths
    hearing_fields: Mapping[str, Paths]
    orders: Paths
    order_fields: Mapping[str, Paths]
    acts_containers: Paths
    acts_fields: Mapping[str, Paths]
    details: Mapping[str, Paths]
    # Any of these being non-empty marks a payload as a case
    markers: Paths
    envelopes: Paths = ("data",)
    reference_codes: Paths = field(default=("cnr",))


def _frozen(**paths: Paths) -> Mapping[str, Paths]:
    return MappingProxyType(dict(paths))


# Keys inside list items, shared by every provider
PARTY_ITEM_FIELDS = _frozen(
    name=("name", "party_name", "partyName"),
    role=("type", "role", "party_type", "partyType"),
)
ADVOCATE_ITEM_FIELDS = _frozen(
    name=("name", "advocate_name", "advocateName"),
    bar_number=("barNumber", "bar_number", "enrolment_number", "enrollmentNumber", "registration_number"),
    phone=("phone", "mobile"),
    email=("email",),
    side=("side", "type"),
)
JUDGE_ITEM_FIELDS = _frozen(
    name=("name", "judge_name", "judgeName"),
    designation=("designation", "title"),
    court=("court", "court_name", "courtName"),
)


KLEOPATRA = AliasTable(
    reference_codes=("cnr", "cnrNumber"),
    scalars=_frozen(
        case_number=("details.registrationNumber", "registrationNumber", "caseNumber", "details.caseNumber"),
        filing_number=("details.filingNumber", "filingNumber"),
        registration_number=("details.registrationNumber", "registrationNumber"),
        title=("title",),
        court_name=("status.courtNumberAndJudge", "courtName", "court"),
        court_location=("courtLocation", "status.courtLocation", "establishment"),
        hall=("hallNumber", "status.hallNumber"),
        case_type=("details.type", "caseType", "type"),
        nature_of_disposal=("status.natureOfDisposal", "natureOfDisposal"),
    ),
    markup=_frozen(
        case_status=("status.caseStage", "caseStage", "stage", "caseStatus"),
    ),
    dates=_frozen(
        filing_date=("details.filingDate", "filingDate"),
        last_hearing_date=("status.lastHearingDate", "lastHearingDate"),
        next_hearing_date=("status.nextHearingDate", "nextHearingDate"),
        registration_date=("details.registrationDate", "registrationDate"),
        first_hearing_date=("status.firstHearingDate", "firstHearingDate"),
        decision_date=("status.decisionDate", "decisionDate"),
    ),
    parties=(
        PartyGroup(("parties.petitioners", "petitioners"), "plaintiff"),
        PartyGroup(("parties.respondents", "respondents"), "defendant"),
        # search hits sometimes carry a single "A vs B" string instead
        PartyGroup(("parties",), "plaintiff"),
    ),
    advocates=(
        AdvocateGroup(("parties.petitionerAdvocates", "petitionerAdvocates"), "petitioner"),
        AdvocateGroup(("parties.respondentAdvocates", "respondentAdvocates"), "respondent"),
        AdvocateGroup(("advocates",)),
    ),
    judges=("judges", "status.judges"),
    hearings=("history", "hearings"),
    hearing_fields=_frozen(
        date=("businessDate", "date"),
        purpose=("purpose",),
        judge=("judge",),
        next_date=("nextDate",),
        url=("url",),
    ),
    orders=("orders",),
    order_fields=_frozen(
        ordinal=("number",),
        name=("name",),
        date=("date",),
        url=("url",),
    ),
    acts_containers=("actsAndSections",),
    acts_fields=_frozen(acts=("acts",), sections=("sections",)),
    details=_frozen(
        subject_matter=("details.subjectMatter", "title"),
        description=("details.description",),
        relief_sought=("details.reliefSought",),
        value=("details.caseValue",),
        jurisdiction=("details.jurisdiction",),
    ),
    markers=("title", "parties", "cnr", "case_details", "details"),
)


# eCourts v17 and Phoenix share the snake_case schema of the national API
SNAKE_CASE = AliasTable(
    reference_codes=("cnr", "cnr_number"),
    scalars=_frozen(
        case_number=("registration_number", "case_number"),
        filing_number=("filing_number", "filing_no"),
        registration_number=("registration_number", "case_number"),
        title=("title", "case_title", "subject_matter"),
        court_name=("court_name", "court", "jurisdiction"),
        court_location=("location", "court_location", "district"),
        hall=("hall_number", "hall", "court_hall"),
        case_type=("case_type", "type", "category"),
        nature_of_disposal=("nature_of_disposal", "disposal_type"),
    ),
    markup=_frozen(
        case_status=("status", "case_status", "current_status"),
    ),
    dates=_frozen(
        filing_date=("filing_date", "date_of_filing", "registration_date"),
        last_hearing_date=("last_hearing_date", "previous_hearing_date"),
        next_hearing_date=("next_hearing_date", "upcoming_hearing_date"),
        registration_date=("registration_date", "reg_date"),
        first_hearing_date=("first_hearing_date", "first_hearing.date"),
        decision_date=("decision_date", "disposal_date"),
    ),
    parties=(
        PartyGroup(("petitioners", "petitioner_names"), "plaintiff"),
        PartyGroup(("respondents", "respondent_names"), "defendant"),
        PartyGroup(("parties",), "petitioner"),
    ),
    advocates=(
        AdvocateGroup(("petitioner_advocates", "petitioner_advocate_names"), "petitioner"),
        AdvocateGroup(("respondent_advocates", "respondent_advocate_names"), "respondent"),
        AdvocateGroup(("advocates",)),
    ),
    judges=("judges", "bench", "magistrate"),
    hearings=("hearing_history", "hearings"),
    hearing_fields=_frozen(
        date=("date", "hearing_date"),
        purpose=("purpose", "subject", "description"),
        judge=("judge", "judge_name"),
        next_date=("next_date", "next_hearing_date"),
        url=("url",),
    ),
    orders=("orders", "case_orders"),
    order_fields=_frozen(
        ordinal=("order_number", "number"),
        name=("order_name", "name", "description"),
        date=("order_date", "date"),
        url=("url", "pdf_url", "download_url"),
    ),
    acts_containers=("acts_and_sections", "legal_provisions"),
    acts_fields=_frozen(acts=("acts", "act_name"), sections=("sections", "section_numbers")),
    details=_frozen(
        subject_matter=("subject_matter", "title", "nature_of_case"),
        description=("description", "case_description", "facts"),
        relief_sought=("relief_sought", "reliefSought", "prayer"),
        value=("case_value", "amount_involved"),
        jurisdiction=("jurisdiction", "territorial_jurisdiction"),
    ),
    markers=("cnr", "case_number", "registration_number", "title", "case_title", "petitioners"),
)


# Government gateways (NAPIX, the portals) answer in flat camelCase
OFFICIAL = AliasTable(
    reference_codes=("cnr", "cnrNumber"),
    scalars=_frozen(
        case_number=("caseNumber", "registrationNumber"),
        filing_number=("filingNumber", "filingNo"),
        registration_number=("registrationNumber",),
        title=("title", "caseTitle"),
        court_name=("court", "courtName"),
        court_location=("courtLocation", "location"),
        hall=("hallNumber", "hall"),
        case_type=("caseType",),
        nature_of_disposal=("natureOfDisposal",),
    ),
    markup=_frozen(
        case_status=("status", "caseStatus"),
    ),
    dates=_frozen(
        filing_date=("filingDate", "dateOfFiling"),
        last_hearing_date=("lastHearingDate",),
        next_hearing_date=("nextHearingDate",),
        registration_date=("registrationDate",),
        first_hearing_date=("firstHearingDate",),
        decision_date=("decisionDate", "disposalDate"),
    ),
    parties=(PartyGroup(("parties",), "petitioner"),),
    advocates=(AdvocateGroup(("advocates",)),),
    judges=("judges",),
    hearings=("hearings", "hearingHistory"),
    hearing_fields=_frozen(
        date=("date", "hearingDate"),
        purpose=("purpose",),
        judge=("judge",),
        next_date=("nextDate", "nextHearingDate"),
        url=("url",),
    ),
    orders=("orders",),
    order_fields=_frozen(
        ordinal=("number", "orderNumber"),
        name=("name", "orderName"),
        date=("date", "orderDate"),
        url=("url", "pdfUrl"),
    ),
    acts_containers=("actsAndSections",),
    acts_fields=_frozen(acts=("acts",), sections=("sections",)),
    details=_frozen(
        subject_matter=("subjectMatter",),
        description=("description",),
        relief_sought=("reliefSought",),
        value=("caseValue",),
        jurisdiction=("jurisdiction",),
    ),
    markers=("cnr", "caseNumber", "title", "caseTitle", "parties"),
)


ALIAS_TABLES: Mapping[ProviderId, AliasTable] = MappingProxyType({
    ProviderId.KLEOPATRA: KLEOPATRA,
    ProviderId.ECOURTS_V17: SNAKE_CASE,
    ProviderId.PHOENIX: SNAKE_CASE,
    ProviderId.NAPIX: OFFICIAL,
    ProviderId.ECOURTS_PORTAL: OFFICIAL,
})
