"""Domain models for reference points, provider POIs and score records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class LocationType(str, Enum):
    """Categories used by the static reference dataset."""

    GYM = "gym"
    SYNERGY = "synergy"
    METRO = "metro"
    HIGH_RISE = "high_rise"
    CORPORATE = "corporate"
    PARK = "park"


class CompetitionLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class MarketGap(str, Enum):
    SATURATED = "SATURATED"
    COMPETITIVE = "COMPETITIVE"
    OPPORTUNITY = "OPPORTUNITY"
    UNTAPPED = "UNTAPPED"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Immutable reference location loaded from the static dataset."""

    id: str
    lat: float
    lng: float
    name: str
    category: LocationType
    details: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class POIRecord:
    """Normalized place returned by the POI provider."""

    id: str
    display_name: str
    location: LatLng
    types: tuple[str, ...] = ()
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None
    price_level: Optional[str] = None
    formatted_address: Optional[str] = None
    business_status: Optional[str] = None

    def has_any_type(self, candidates: frozenset[str] | set[str]) -> bool:
        return any(place_type in candidates for place_type in self.types)


@dataclass(slots=True)
class ScoringMatrix:
    """Bounded sub-scores and composite, each rounded to an integer in [0, 100]."""

    demographic_load: int
    connectivity: int
    competitor_ratio: int
    infrastructure: int
    total: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ScoringMatrix":
        return cls(
            demographic_load=int(payload["demographic_load"]),
            connectivity=int(payload["connectivity"]),
            competitor_ratio=int(payload["competitor_ratio"]),
            infrastructure=int(payload["infrastructure"]),
            total=int(payload["total"]),
        )


@dataclass(slots=True)
class AggregatedIntel:
    """Counts and classification labels stored in the durable cache tier.

    Never carries POI objects; only what is needed to redraw approximate
    scores without refetching.
    """

    gyms: int
    corporates: int
    cafes: int
    transit: int
    apartments: int
    vibe_active: int
    vibe_entertainment: int
    competition_level: CompetitionLevel
    market_gap: MarketGap
    scores: Optional[ScoringMatrix] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gyms": self.gyms,
            "corporates": self.corporates,
            "cafes": self.cafes,
            "transit": self.transit,
            "apartments": self.apartments,
            "vibe_active": self.vibe_active,
            "vibe_entertainment": self.vibe_entertainment,
            "competition_level": self.competition_level.value,
            "market_gap": self.market_gap.value,
            "scores": self.scores.to_dict() if self.scores else None,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "AggregatedIntel":
        """Rebuild from a decoded payload; raises KeyError/ValueError/TypeError on malformed input."""
        scores = payload.get("scores")
        return cls(
            gyms=int(payload["gyms"]),
            corporates=int(payload["corporates"]),
            cafes=int(payload["cafes"]),
            transit=int(payload["transit"]),
            apartments=int(payload["apartments"]),
            vibe_active=int(payload["vibe_active"]),
            vibe_entertainment=int(payload["vibe_entertainment"]),
            competition_level=CompetitionLevel(payload["competition_level"]),
            market_gap=MarketGap(payload["market_gap"]),
            scores=ScoringMatrix.from_dict(scores) if scores else None,
        )
