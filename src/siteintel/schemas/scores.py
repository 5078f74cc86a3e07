"""Pydantic models for reference-dataset scoring."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import LocationType
from .intelligence import ScoringMatrixModel


class ReferenceScoreRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    radius_km: float = Field(1.0, gt=0.0, le=20.0)


class ReferencePointModel(BaseModel):
    id: str
    name: str
    category: LocationType
    lat: float
    lng: float
    details: Optional[str] = None
    distance_km: float


class ReferenceScoreResponse(BaseModel):
    scores: ScoringMatrixModel
    nearby: List[ReferencePointModel]
