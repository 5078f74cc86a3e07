"""Location intelligence report models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ...models.domain import AggregatedIntel, CompetitionLevel, MarketGap, POIRecord


@dataclass(slots=True)
class GymSummary:
    total: int
    high_rated: int
    average_rating: float
    premium_count: int
    budget_count: int
    places: List[POIRecord] = field(default_factory=list)


@dataclass(slots=True)
class CategorySummary:
    total: int
    places: List[POIRecord] = field(default_factory=list)


@dataclass(slots=True)
class CafeSummary:
    total: int
    health_focused: int
    places: List[POIRecord] = field(default_factory=list)


@dataclass(slots=True)
class TransitSummary:
    total: int
    metro: int
    bus: int
    places: List[POIRecord] = field(default_factory=list)


@dataclass(slots=True)
class VibeSummary:
    total: int
    active: int
    entertainment: int
    places: List[POIRecord] = field(default_factory=list)


@dataclass(slots=True)
class LocationIntelligence:
    gyms: GymSummary
    corporate_offices: CategorySummary
    cafes: CafeSummary
    transit: TransitSummary
    apartments: CategorySummary
    vibe: VibeSummary
    competition_level: CompetitionLevel
    market_gap: MarketGap

    def to_aggregated(self) -> AggregatedIntel:
        """Counts and labels only, for the durable cache tier."""
        return AggregatedIntel(
            gyms=self.gyms.total,
            corporates=self.corporate_offices.total,
            cafes=self.cafes.total,
            transit=self.transit.total,
            apartments=self.apartments.total,
            vibe_active=self.vibe.active,
            vibe_entertainment=self.vibe.entertainment,
            competition_level=self.competition_level,
            market_gap=self.market_gap,
        )
