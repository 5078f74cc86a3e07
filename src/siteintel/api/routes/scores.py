"""Reference-dataset scoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.intelligence import ScoringMatrixModel
from ...schemas.scores import ReferencePointModel, ReferenceScoreRequest, ReferenceScoreResponse
from ...services import analysis

router = APIRouter(prefix="/scores", tags=["scores"])


@router.post("/reference", response_model=ReferenceScoreResponse, status_code=status.HTTP_200_OK)
def score_reference_site(payload: ReferenceScoreRequest) -> ReferenceScoreResponse:
    try:
        result = analysis.score_reference_site(payload.lat, payload.lng, payload.radius_km)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ReferenceScoreResponse(
        scores=ScoringMatrixModel.model_validate(result.scores),
        nearby=[
            ReferencePointModel(
                id=point.id,
                name=point.name,
                category=point.category,
                lat=point.lat,
                lng=point.lng,
                details=point.details,
                distance_km=round(distance, 3),
            )
            for point, distance in result.nearby
        ],
    )
