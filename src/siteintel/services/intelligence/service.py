"""High-level orchestration for location intelligence requests."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from ...config import settings
from ...models.domain import AggregatedIntel, POIRecord
from ..places.cache import PlacesCache, build_ward_key
from ..places.client import FieldTier, PlacesClient
from ..places.filters import CORPORATE_BLOCKLIST, exclude_by_name, health_focused, split_by_types
from .classification import classify_competition, classify_market_gap
from .models import CafeSummary, CategorySummary, GymSummary, LocationIntelligence, TransitSummary, VibeSummary

METRO_TYPES = frozenset({"subway_station", "light_rail_station"})
ACTIVE_VIBE_TYPES = frozenset({"yoga_studio", "sports_complex"})
PREMIUM_PRICE_LEVELS = frozenset({"PRICE_LEVEL_EXPENSIVE", "PRICE_LEVEL_VERY_EXPENSIVE"})
BUDGET_PRICE_LEVELS = frozenset({"PRICE_LEVEL_INEXPENSIVE", "PRICE_LEVEL_FREE"})
HIGH_RATING_THRESHOLD = 4.0

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CategoryQuery:
    name: str
    place_types: tuple[str, ...]
    primary_only: bool = False
    field_tier: FieldTier = FieldTier.BASIC


# Six requests per analysis. Gyms and cafes are shown with ratings, so they
# use the advanced projection; the rest only feed counts. "bar" is left out
# of vibe on purpose, it inflates entertainment counts.
CATEGORY_QUERIES: tuple[CategoryQuery, ...] = (
    CategoryQuery("gyms", ("gym",), field_tier=FieldTier.ADVANCED),
    CategoryQuery("corporates", ("corporate_office", "coworking_space"), primary_only=True),
    CategoryQuery("cafes", ("cafe", "coffee_shop"), field_tier=FieldTier.ADVANCED),
    CategoryQuery(
        "transit",
        ("subway_station", "light_rail_station", "bus_station", "bus_stop", "transit_station"),
    ),
    CategoryQuery("apartments", ("apartment_complex",)),
    CategoryQuery("vibe", ("yoga_studio", "sports_complex", "movie_theater", "night_club")),
)


async def _search_category(
    client: PlacesClient,
    query: CategoryQuery,
    lat: float,
    lng: float,
    radius_m: float,
    timeout: float,
) -> list[POIRecord]:
    try:
        return await asyncio.wait_for(
            client.nearby_search(
                lat,
                lng,
                radius_m,
                query.place_types,
                primary_only=query.primary_only,
                field_tier=query.field_tier,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Category '{query.name}' timed out after {timeout:.1f}s, treating as empty")
        return []
    except Exception:
        logger.exception(f"Category '{query.name}' failed unexpectedly, treating as empty")
        return []


def summarize_gyms(gyms: Sequence[POIRecord]) -> GymSummary:
    ratings = [gym.rating for gym in gyms if gym.rating]
    average = sum(ratings) / len(ratings) if ratings else 0.0
    return GymSummary(
        total=len(gyms),
        high_rated=sum(1 for gym in gyms if gym.rating and gym.rating >= HIGH_RATING_THRESHOLD),
        average_rating=round(average, 1),
        premium_count=sum(1 for gym in gyms if gym.price_level in PREMIUM_PRICE_LEVELS),
        budget_count=sum(1 for gym in gyms if gym.price_level in BUDGET_PRICE_LEVELS),
        places=list(gyms),
    )


def build_intelligence(
    *,
    gyms: Sequence[POIRecord],
    corporates_raw: Sequence[POIRecord],
    cafes: Sequence[POIRecord],
    transit: Sequence[POIRecord],
    apartments: Sequence[POIRecord],
    vibe: Sequence[POIRecord],
) -> LocationIntelligence:
    """Apply post-filters and classification to per-category results."""
    corporates = exclude_by_name(corporates_raw, CORPORATE_BLOCKLIST)
    logger.info(f"Corporates: {len(corporates_raw)} raw -> {len(corporates)} after blocklist")

    metro, bus = split_by_types(transit, METRO_TYPES)
    active, entertainment = split_by_types(vibe, ACTIVE_VIBE_TYPES)

    logger.info(
        f"POI detection: gyms={len(gyms)} corporates={len(corporates)} cafes={len(cafes)} "
        f"transit={len(transit)} (metro={len(metro)}, bus={len(bus)}) apartments={len(apartments)} "
        f"vibe_active={len(active)} vibe_entertainment={len(entertainment)}"
    )
    if not corporates:
        logger.warning("No corporates found in catchment")
    if not apartments:
        logger.warning("No apartments found in catchment")

    return LocationIntelligence(
        gyms=summarize_gyms(gyms),
        corporate_offices=CategorySummary(total=len(corporates), places=corporates),
        cafes=CafeSummary(total=len(cafes), health_focused=len(health_focused(cafes)), places=list(cafes)),
        transit=TransitSummary(total=len(transit), metro=len(metro), bus=len(bus), places=list(transit)),
        apartments=CategorySummary(total=len(apartments), places=list(apartments)),
        vibe=VibeSummary(total=len(vibe), active=len(active), entertainment=len(entertainment), places=list(vibe)),
        competition_level=classify_competition(len(gyms)),
        market_gap=classify_market_gap(len(gyms), len(corporates), len(apartments)),
    )


async def get_location_intelligence(
    client: PlacesClient,
    lat: float,
    lng: float,
    radius_m: float = 1000,
    *,
    category_timeout: float | None = None,
) -> LocationIntelligence:
    """Query every category concurrently and fold the results into one report.

    A failing or slow category contributes an empty list; the report is
    always produced. Counts and labels are written to the durable tier.
    """
    if radius_m <= 0:
        raise ValueError("radius_m must be > 0")
    timeout = category_timeout if category_timeout is not None else settings.places_category_timeout_seconds
    logger.info(f"Location intelligence request lat={lat} lng={lng} radius={radius_m}")

    results = await asyncio.gather(
        *(_search_category(client, query, lat, lng, radius_m, timeout) for query in CATEGORY_QUERIES)
    )
    by_name = {query.name: result for query, result in zip(CATEGORY_QUERIES, results)}

    intel = build_intelligence(
        gyms=by_name["gyms"],
        corporates_raw=by_name["corporates"],
        cafes=by_name["cafes"],
        transit=by_name["transit"],
        apartments=by_name["apartments"],
        vibe=by_name["vibe"],
    )
    client.cache.set_durable(build_ward_key(lat, lng, radius_m), intel.to_aggregated())
    return intel


def get_cached_snapshot(cache: PlacesCache, lat: float, lng: float, radius_m: float) -> AggregatedIntel | None:
    """Return the durable ward-level snapshot, if one is still fresh."""
    return cache.get_durable(build_ward_key(lat, lng, radius_m))
