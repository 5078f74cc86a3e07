"""Location intelligence aggregation."""

from .aggregate import AggregateFilter, AggregateResult, aggregate_places, get_aggregate_data
from .classification import classify_competition, classify_market_gap, demand_supply_ratio
from .models import LocationIntelligence
from .service import build_intelligence, get_cached_snapshot, get_location_intelligence, summarize_gyms

__all__ = [
    "AggregateFilter",
    "AggregateResult",
    "LocationIntelligence",
    "aggregate_places",
    "build_intelligence",
    "classify_competition",
    "classify_market_gap",
    "demand_supply_ratio",
    "get_aggregate_data",
    "get_cached_snapshot",
    "get_location_intelligence",
    "summarize_gyms",
]
