"""Pydantic request/response models for intelligence endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import CompetitionLevel, MarketGap


class LocationRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0, description="Site latitude.")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Site longitude.")
    radius_m: float = Field(1000.0, gt=0.0, le=50000.0, description="Catchment radius in meters.")


class LatLngModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lat: float
    lng: float


class POIRecordModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    location: LatLngModel
    types: List[str]
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None
    price_level: Optional[str] = None
    formatted_address: Optional[str] = None
    business_status: Optional[str] = None


class GymSummaryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    high_rated: int
    average_rating: float
    premium_count: int
    budget_count: int
    places: List[POIRecordModel]


class CategorySummaryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    places: List[POIRecordModel]


class CafeSummaryModel(CategorySummaryModel):
    health_focused: int


class TransitSummaryModel(CategorySummaryModel):
    metro: int
    bus: int


class VibeSummaryModel(CategorySummaryModel):
    active: int
    entertainment: int


class LocationIntelligenceModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    gyms: GymSummaryModel
    corporate_offices: CategorySummaryModel
    cafes: CafeSummaryModel
    transit: TransitSummaryModel
    apartments: CategorySummaryModel
    vibe: VibeSummaryModel
    competition_level: CompetitionLevel
    market_gap: MarketGap


class ScoringMatrixModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    demographic_load: int = Field(..., ge=0, le=100)
    connectivity: int = Field(..., ge=0, le=100)
    competitor_ratio: int = Field(..., ge=0, le=100)
    infrastructure: int = Field(..., ge=0, le=100)
    total: int = Field(..., ge=0, le=100)


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    intelligence: LocationIntelligenceModel
    scores: ScoringMatrixModel
    recommendation: str


class SnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    gyms: int
    corporates: int
    cafes: int
    transit: int
    apartments: int
    vibe_active: int
    vibe_entertainment: int
    competition_level: CompetitionLevel
    market_gap: MarketGap
    scores: Optional[ScoringMatrixModel] = None
