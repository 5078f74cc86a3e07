"""Filtered count/rating aggregates over a single nearby search."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

from ...models.domain import POIRecord
from ..places.client import FieldTier, PlacesClient

OPERATIONAL_STATUS = "OPERATIONAL"


@dataclass(slots=True)
class AggregateFilter:
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None
    price_level: Optional[str] = None
    open_now: bool = False
    min_user_rating_count: Optional[int] = None

    def matches(self, place: POIRecord) -> bool:
        if self.min_rating is not None and (place.rating is None or place.rating < self.min_rating):
            return False
        if self.max_rating is not None and (place.rating is None or place.rating > self.max_rating):
            return False
        if self.price_level is not None and place.price_level != self.price_level:
            return False
        if self.min_user_rating_count is not None and (
            place.user_rating_count is None or place.user_rating_count < self.min_user_rating_count
        ):
            return False
        if self.open_now and place.business_status != OPERATIONAL_STATUS:
            return False
        return True


@dataclass(slots=True)
class AggregateResult:
    count: int
    place_ids: Optional[list[str]]
    average_rating: Optional[float]
    price_level_distribution: dict[str, int]


def aggregate_places(
    places: Sequence[POIRecord],
    filters: AggregateFilter | None = None,
    *,
    return_place_ids: bool = False,
) -> AggregateResult:
    selected = [place for place in places if filters is None or filters.matches(place)]
    ratings = [place.rating for place in selected if place.rating is not None]
    distribution = Counter(place.price_level for place in selected if place.price_level)
    return AggregateResult(
        count=len(selected),
        place_ids=[place.id for place in selected] if return_place_ids else None,
        average_rating=sum(ratings) / len(ratings) if ratings else None,
        price_level_distribution=dict(distribution),
    )


async def get_aggregate_data(
    client: PlacesClient,
    lat: float,
    lng: float,
    radius_m: float,
    place_types: Sequence[str],
    filters: AggregateFilter | None = None,
    return_place_ids: bool = False,
) -> AggregateResult:
    """Filtered aggregate over a fresh ADVANCED-tier search.

    The memory tier is bypassed; it may hold a BASIC projection without
    ratings or price levels stored by an earlier analysis.
    """
    places = await client.nearby_search(
        lat, lng, radius_m, place_types, field_tier=FieldTier.ADVANCED, use_cache=False
    )
    return aggregate_places(places, filters, return_place_ids=return_place_ids)
