"""Pydantic request/response models for place search endpoints."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .intelligence import LocationRequest, POIRecordModel


class TextSearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=200)
    lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    lng: Optional[float] = Field(default=None, ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def _bias_needs_both_coordinates(self) -> "TextSearchRequest":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self


class PlaceSearchResponse(BaseModel):
    count: int
    items: List[POIRecordModel]


class AggregateFilterModel(BaseModel):
    min_rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    max_rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    price_level: Optional[str] = None
    open_now: bool = False
    min_user_rating_count: Optional[int] = Field(default=None, ge=0)


class AggregateRequest(LocationRequest):
    place_types: List[str] = Field(..., min_length=1, description="Provider place types to include.")
    filters: Optional[AggregateFilterModel] = None
    return_place_ids: bool = False


class AggregateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    count: int
    place_ids: Optional[List[str]] = None
    average_rating: Optional[float] = None
    price_level_distribution: Dict[str, int]
