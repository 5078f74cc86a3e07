"""Spatial query strategies."""

from .base import SpatialQueryStrategy
from .dispatcher import get_strategy
from .multi_zone import MultiZoneQuery
from .single_zone import SingleZoneQuery

__all__ = ["SpatialQueryStrategy", "SingleZoneQuery", "MultiZoneQuery", "get_strategy"]
