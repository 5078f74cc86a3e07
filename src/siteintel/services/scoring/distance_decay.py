"""Distance-decay scoring against the static reference dataset.

Every reference point inside a radius-scaled threshold contributes
``(threshold - distance) * weight`` to its sub-score. Competitor gyms feed a
separate density accumulator that is inverted into ``competitor_ratio``.
Only used for the packaged dataset; live provider counts go through
``count_based``.
"""

from __future__ import annotations

from typing import Iterable

from ...models.domain import GeoPoint, LocationType, ScoringMatrix
from ..geospatial import haversine_km
from .common import build_matrix, clamp

WEIGHTS = {
    "demographic_load": 0.45,
    "connectivity": 0.10,
    "competitor_ratio": 0.25,
    "infrastructure": 0.20,
}

BASE_DEMAND = 30.0
BASE_CONNECTIVITY = 20.0
BASE_INFRASTRUCTURE = 20.0
HIGH_DEMAND_THRESHOLD = 80.0
HIGH_DEMAND_BONUS = 15.0


def score_reference_points(
    lat: float,
    lng: float,
    points: Iterable[GeoPoint],
    search_radius_km: float = 1.0,
) -> ScoringMatrix:
    if search_radius_km <= 0:
        raise ValueError("search_radius_km must be > 0")

    demand = BASE_DEMAND
    connectivity = BASE_CONNECTIVITY
    infrastructure = BASE_INFRASTRUCTURE
    competitor_density = 0.0

    synergy_threshold = search_radius_km * 0.8
    connectivity_threshold = search_radius_km * 1.5
    demand_threshold = search_radius_km * 1.0
    # Smaller catchments penalize each nearby competitor harder.
    competitor_weight = 45 if search_radius_km < 1 else 30

    for point in points:
        dist = haversine_km(lat, lng, point.lat, point.lng)
        if dist > search_radius_km * 1.2:
            continue

        match point.category:
            case LocationType.GYM if dist < search_radius_km:
                competitor_density += (search_radius_km - dist) * competitor_weight
            case LocationType.CORPORATE if dist < demand_threshold:
                demand += (demand_threshold - dist) * (150 / search_radius_km)
            case LocationType.HIGH_RISE if dist < demand_threshold:
                demand += (demand_threshold - dist) * (120 / search_radius_km)
            case LocationType.PARK if dist < synergy_threshold:
                infrastructure += (synergy_threshold - dist) * (140 / search_radius_km)
            case LocationType.SYNERGY if dist < synergy_threshold:
                infrastructure += (synergy_threshold - dist) * (80 / search_radius_km)
            case LocationType.METRO if dist < connectivity_threshold:
                connectivity += (connectivity_threshold - dist) * (60 / search_radius_km)

    competitor_ratio = max(0.0, 100.0 - competitor_density)
    if clamp(demand) > HIGH_DEMAND_THRESHOLD:
        competitor_ratio += HIGH_DEMAND_BONUS

    return build_matrix(demand, connectivity, competitor_ratio, infrastructure, WEIGHTS)
