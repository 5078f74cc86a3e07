"""Location intelligence endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.intelligence import AnalysisResponse, LocationRequest, SnapshotResponse
from ...services import analysis
from ...services.places.client import PlacesConfigurationError

router = APIRouter(prefix="/intelligence", tags=["intelligence"])


@router.post("/analyze", response_model=AnalysisResponse, status_code=status.HTTP_200_OK)
async def analyze_location(payload: LocationRequest) -> AnalysisResponse:
    """Run the six category queries, score the site and render the strategy text.

    Individual category failures are reported as empty categories; the
    request only fails when the provider is not configured at all.
    """
    try:
        result = await analysis.analyze_location(payload.lat, payload.lng, payload.radius_m)
    except PlacesConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AnalysisResponse.model_validate(result)


@router.get("/snapshot", response_model=SnapshotResponse, status_code=status.HTTP_200_OK)
def get_snapshot(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    radius_m: float = Query(default=1000.0, gt=0.0, le=50000.0),
) -> SnapshotResponse:
    """Return the cached ward-level counts for a site, if still fresh."""
    snapshot = analysis.get_snapshot(lat, lng, radius_m)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No cached snapshot for ({lat}, {lng}) radius {radius_m}.",
        )
    return SnapshotResponse.model_validate(snapshot)
