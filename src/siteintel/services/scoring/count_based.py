"""Log-normalized scoring over live POI counts.

Each category count goes through ``log_norm`` against a saturation point so
no single category can dominate, then the sub-scores are combined with
``WEIGHTS``. ``competitor_ratio`` carries the market gap index: demand units
per gym, normalized against a 5:1 target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ...models.domain import ScoringMatrix
from ..intelligence.classification import demand_supply_ratio
from ..intelligence.models import LocationIntelligence
from .common import build_matrix, clamp, log_norm

WEIGHTS = {
    "demographic_load": 0.40,
    "competitor_ratio": 0.30,
    "infrastructure": 0.20,
    "connectivity": 0.10,
}

APARTMENT_SATURATION = 40
CORPORATE_SATURATION = 30
CAFE_SATURATION = 30
GYM_SATURATION = 15
MAX_GYM_PENALTY = 0.35
TARGET_GAP_RATIO = 5
ACTIVE_VIBE_SATURATION = 6
ENTERTAINMENT_SATURATION = 8
METRO_SATURATION = 5
BUS_SATURATION = 10
BUS_DISCOUNT = 0.6

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CategoryCounts:
    gyms: int = 0
    corporates: int = 0
    cafes: int = 0
    apartments: int = 0
    metro: int = 0
    bus: int = 0
    vibe_active: int = 0
    vibe_entertainment: int = 0

    def __post_init__(self) -> None:
        for name in self.__dataclass_fields__:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    @classmethod
    def from_intelligence(cls, intel: LocationIntelligence) -> "CategoryCounts":
        return cls(
            gyms=intel.gyms.total,
            corporates=intel.corporate_offices.total,
            cafes=intel.cafes.total,
            apartments=intel.apartments.total,
            metro=intel.transit.metro,
            bus=intel.transit.bus,
            vibe_active=intel.vibe.active,
            vibe_entertainment=intel.vibe.entertainment,
        )


def score_counts(counts: CategoryCounts) -> ScoringMatrix:
    raw_demand = clamp(
        log_norm(counts.apartments, APARTMENT_SATURATION) * 0.45
        + log_norm(counts.corporates, CORPORATE_SATURATION) * 0.35
        + log_norm(counts.cafes, CAFE_SATURATION) * 0.20
    )
    gym_penalty = min(log_norm(counts.gyms, GYM_SATURATION), 100.0) / 100.0 * MAX_GYM_PENALTY
    demand = raw_demand * (1 - gym_penalty)

    gap_ratio = demand_supply_ratio(counts.gyms, counts.corporates, counts.apartments)
    gap = log_norm(gap_ratio, TARGET_GAP_RATIO)

    vibe = (
        log_norm(counts.vibe_active, ACTIVE_VIBE_SATURATION) * 0.55
        + log_norm(counts.vibe_entertainment, ENTERTAINMENT_SATURATION) * 0.45
    )

    connectivity = (
        log_norm(counts.metro, METRO_SATURATION) * 0.65
        + log_norm(counts.bus, BUS_SATURATION) * BUS_DISCOUNT * 0.35
    )

    matrix = build_matrix(demand, connectivity, gap, vibe, WEIGHTS)
    logger.info(
        f"Scoring breakdown: demand={matrix.demographic_load} gap={matrix.competitor_ratio} "
        f"vibe={matrix.infrastructure} conn={matrix.connectivity} total={matrix.total} "
        f"gym_penalty={gym_penalty * 100:.0f}% gap_ratio={gap_ratio:.2f}"
    )
    return matrix


def score_intelligence(intel: LocationIntelligence) -> ScoringMatrix:
    return score_counts(CategoryCounts.from_intelligence(intel))
