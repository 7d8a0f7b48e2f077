"""Court hierarchy lookups (states, districts, court complexes, courts).

These feed the court-scope identifiers that case-number searches need.
They come from the Phoenix provider, which exposes them as plain GETs.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from courtrecords.config import Settings
from courtrecords.models.search import ProviderId
from courtrecords.providers.transport import RetryingTransport

logger = logging.getLogger(__name__)

REFERENCE_PROVIDER = ProviderId.PHOENIX

STATES_PATH = "/states"
DISTRICTS_PATH = "/districts"
COMPLEXES_PATH = "/court-complexes"
COURTS_PATH = "/courts"

CODE_KEYS = ("code", "id", "stateCode", "districtCode", "courtComplexId", "courtId", "state_code", "district_code")
NAME_KEYS = ("name", "stateName", "districtName", "complexName", "courtName", "state_name", "district_name")


@dataclass(frozen=True)
class Place:
    code: str
    name: str


@dataclass(frozen=True)
class Filters:
    """Everything a court-scope picker needs in one response."""
    states: tuple[Place, ...] = ()
    districts: tuple[Place, ...] = ()
    complexes: tuple[Place, ...] = ()
    courts: tuple[Place, ...] = ()
    errors: Mapping[str, str] = field(default_factory=dict)


def _text(item: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = item.get(key)
        if value is not None and not isinstance(value, bool) and str(value).strip():
            return str(value).strip()
    return ""


def parse_places(payload: Any, envelope: str) -> tuple[Place, ...]:
    """Read a list of places from a bare list or a ``{data|<envelope>: [...]}`` wrapper."""
    items = payload
    if isinstance(payload, Mapping):
        items = payload.get("data")
        if items is None:
            items = payload.get(envelope)
    if not isinstance(items, list):
        return ()

    places = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        code = _text(item, CODE_KEYS)
        if code:
            places.append(Place(code=code, name=_text(item, NAME_KEYS) or code))
    return tuple(places)


class ReferenceDataClient:
    def __init__(self, settings: Settings, transport: RetryingTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport or RetryingTransport(settings)

    async def _get(self, path: str, envelope: str, **params: str) -> tuple[Place, ...]:
        response = await self.transport.request(
            REFERENCE_PROVIDER,
            "GET",
            path,
            params=params or None,
            timeout=self.settings.reference_timeout,
        )
        places = parse_places(response.payload, envelope)
        logger.debug(f"{path} {params}: {len(places)} entries")
        return places

    async def states(self) -> tuple[Place, ...]:
        return await self._get(STATES_PATH, "states")

    async def districts(self, state_code: str) -> tuple[Place, ...]:
        if not state_code:
            raise ValueError("state_code is required")
        return await self._get(DISTRICTS_PATH, "districts", stateCode=state_code)

    async def complexes(self, district_code: str) -> tuple[Place, ...]:
        if not district_code:
            raise ValueError("district_code is required")
        return await self._get(COMPLEXES_PATH, "complexes", districtCode=district_code)

    async def courts(self, complex_id: str) -> tuple[Place, ...]:
        if not complex_id:
            raise ValueError("complex_id is required")
        return await self._get(COURTS_PATH, "courts", courtComplexId=complex_id)

    async def load_filters(
        self,
        state_code: str | None = None,
        district_code: str | None = None,
        complex_id: str | None = None,
    ) -> Filters:
        """Fetch every level the caller has a parent for, concurrently.

        A failing level is reported in ``errors`` and left empty; the other
        levels are still returned.
        """
        levels = {"states": self.states()}
        if state_code:
            levels["districts"] = self.districts(state_code)
        if district_code:
            levels["complexes"] = self.complexes(district_code)
        if complex_id:
            levels["courts"] = self.courts(complex_id)

        results = await asyncio.gather(*levels.values(), return_exceptions=True)

        loaded: dict[str, tuple[Place, ...]] = {}
        errors: dict[str, str] = {}
        for name, result in zip(levels, results):
            if isinstance(result, Exception):
                logger.warning(f"Loading {name} failed: {result}")
                errors[name] = str(result)
            else:
                loaded[name] = result

        return Filters(**loaded, errors=errors)
