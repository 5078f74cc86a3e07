"""Site analysis entry points used by the API layer."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Sequence

from ..config import settings
from ..data.reference_repository import load_reference_points
from ..models.domain import AggregatedIntel, GeoPoint, POIRecord, ScoringMatrix
from ..persistence.kv_store import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .geospatial import points_within_radius
from .intelligence.aggregate import AggregateFilter, AggregateResult, get_aggregate_data
from .intelligence.models import LocationIntelligence
from .intelligence.service import get_cached_snapshot, get_location_intelligence
from .places.cache import PlacesCache, build_ward_key
from .places.client import PlacesClient
from .recommendation import generate_recommendation
from .scoring import score_intelligence, score_reference_points

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SiteAnalysis:
    intelligence: LocationIntelligence
    scores: ScoringMatrix
    recommendation: str


@dataclass(slots=True)
class ReferenceScore:
    scores: ScoringMatrix
    nearby: list[tuple[GeoPoint, float]]


def _build_store() -> KeyValueStore:
    if settings.durable_cache_backend == "memory":
        return MemoryKeyValueStore()
    try:
        return FileKeyValueStore()
    except OSError as exc:
        logger.warning(f"Durable cache directory unavailable ({exc}); falling back to in-process store")
        return MemoryKeyValueStore()


@functools.lru_cache(maxsize=1)
def get_places_cache() -> PlacesCache:
    """Process-wide cache shared by every request."""
    return PlacesCache(store=_build_store())


def build_places_client() -> PlacesClient:
    """Raises ``PlacesConfigurationError`` when no API key is configured."""
    return PlacesClient(cache=get_places_cache())


async def analyze_location(lat: float, lng: float, radius_m: float = 1000) -> SiteAnalysis:
    client = build_places_client()
    intel = await get_location_intelligence(client, lat, lng, radius_m)
    scores = score_intelligence(intel)

    aggregated = intel.to_aggregated()
    aggregated.scores = scores
    client.cache.set_durable(build_ward_key(lat, lng, radius_m), aggregated)

    return SiteAnalysis(
        intelligence=intel,
        scores=scores,
        recommendation=generate_recommendation(intel, scores),
    )


def get_snapshot(lat: float, lng: float, radius_m: float = 1000) -> AggregatedIntel | None:
    return get_cached_snapshot(get_places_cache(), lat, lng, radius_m)


async def search_places(query: str, lat: float | None = None, lng: float | None = None) -> list[POIRecord]:
    client = build_places_client()
    return await client.text_search(query, lat, lng)


async def aggregate_places(
    lat: float,
    lng: float,
    radius_m: float,
    place_types: Sequence[str],
    filters: AggregateFilter | None = None,
    return_place_ids: bool = False,
) -> AggregateResult:
    client = build_places_client()
    return await get_aggregate_data(client, lat, lng, radius_m, place_types, filters, return_place_ids)


def score_reference_site(lat: float, lng: float, radius_km: float = 1.0) -> ReferenceScore:
    """Distance-decay score against the packaged reference dataset."""
    points = load_reference_points()
    return ReferenceScore(
        scores=score_reference_points(lat, lng, points, radius_km),
        nearby=points_within_radius(lat, lng, radius_km, points),
    )


def clear_caches() -> dict[str, int]:
    cache = get_places_cache()
    memory_entries = cache.stats()["memory_entries"]
    cache.clear_memory()
    durable_removed = cache.clear_durable()
    return {"memory_cleared": memory_entries, "durable_cleared": durable_removed}
