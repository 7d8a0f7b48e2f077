from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from courtrecords.api.schemas import ResolveCaseQuery, resolution_body
from courtrecords.models.outcomes import AllProvidersExhausted, InvalidInput
from courtrecords.providers.cascade import CaseResolver
from courtrecords.providers.reference import ReferenceDataClient
from courtrecords.providers.transport import TransportFailure

router = APIRouter(prefix="/api")


def get_resolver(request: Request) -> CaseResolver:
    return request.app.state.resolver


def get_reference_client(request: Request) -> ReferenceDataClient:
    return request.app.state.reference


@router.post("/cases/resolve")
async def resolve_case(query: ResolveCaseQuery, resolver: CaseResolver = Depends(get_resolver)):
    """Look up a case, or search for cases, across the upstream providers."""
    resolution = await resolver.resolve_case(query.to_request())

    status_code = 200
    if isinstance(resolution, InvalidInput):
        status_code = 422
    elif isinstance(resolution, AllProvidersExhausted):
        status_code = 504 if resolution.deadline_exceeded else 502

    return JSONResponse(resolution_body(resolution), status_code=status_code)


async def _places(lookup):
    try:
        places = await lookup
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {"data": [asdict(place) for place in places]}


@router.get("/reference/states")
async def states(client: ReferenceDataClient = Depends(get_reference_client)):
    return await _places(client.states())


@router.get("/reference/districts")
async def districts(
    state_code: str = Query(..., min_length=1),
    client: ReferenceDataClient = Depends(get_reference_client),
):
    return await _places(client.districts(state_code))


@router.get("/reference/complexes")
async def complexes(
    district_code: str = Query(..., min_length=1),
    client: ReferenceDataClient = Depends(get_reference_client),
):
    return await _places(client.complexes(district_code))


@router.get("/reference/courts")
async def courts(
    complex_id: str = Query(..., min_length=1),
    client: ReferenceDataClient = Depends(get_reference_client),
):
    return await _places(client.courts(complex_id))


@router.get("/reference/filters")
async def filters(
    state_code: str | None = None,
    district_code: str | None = None,
    complex_id: str | None = None,
    client: ReferenceDataClient = Depends(get_reference_client),
):
    """All court-scope levels the caller has a parent code for, in one call."""
    loaded = await client.load_filters(state_code, district_code, complex_id)
    return asdict(loaded)
