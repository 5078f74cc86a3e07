"""Factory for spatial query strategies based on configuration."""

from __future__ import annotations

from ....config import settings
from .base import SpatialQueryStrategy
from .multi_zone import MultiZoneQuery
from .single_zone import SingleZoneQuery


def get_strategy(name: str | None = None) -> SpatialQueryStrategy:
    match name or settings.places_query_strategy:
        case "single_zone":
            return SingleZoneQuery()
        case "multi_zone":
            return MultiZoneQuery(sub_radius_factor=settings.multi_zone_sub_radius_factor)
        case other:
            raise ValueError(f"Unknown spatial query strategy '{other}'.")
