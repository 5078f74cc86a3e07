"""Place search endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.intelligence import POIRecordModel
from ...schemas.places import AggregateRequest, AggregateResponse, PlaceSearchResponse, TextSearchRequest
from ...services import analysis
from ...services.intelligence.aggregate import AggregateFilter
from ...services.places.client import PlacesConfigurationError

router = APIRouter(prefix="/places", tags=["places"])


def _unavailable(exc: PlacesConfigurationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post("/search", response_model=PlaceSearchResponse, status_code=status.HTTP_200_OK)
async def search_places(payload: TextSearchRequest) -> PlaceSearchResponse:
    try:
        places = await analysis.search_places(payload.query, payload.lat, payload.lng)
    except PlacesConfigurationError as exc:
        raise _unavailable(exc) from exc
    return PlaceSearchResponse(
        count=len(places),
        items=[POIRecordModel.model_validate(place) for place in places],
    )


@router.post("/aggregate", response_model=AggregateResponse, status_code=status.HTTP_200_OK)
async def aggregate_places(payload: AggregateRequest) -> AggregateResponse:
    """Counts, average rating and price distribution for one filtered nearby search."""
    filters = AggregateFilter(**payload.filters.model_dump()) if payload.filters else None
    try:
        result = await analysis.aggregate_places(
            payload.lat,
            payload.lng,
            payload.radius_m,
            payload.place_types,
            filters=filters,
            return_place_ids=payload.return_place_ids,
        )
    except PlacesConfigurationError as exc:
        raise _unavailable(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AggregateResponse.model_validate(result)
