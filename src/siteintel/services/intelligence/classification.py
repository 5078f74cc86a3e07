"""Competition and market-gap classification from category counts."""

from __future__ import annotations

from ...models.domain import CompetitionLevel, MarketGap

APARTMENT_DEMAND_WEIGHT = 0.8

# (inclusive upper bound, level); anything above the last bound is VERY_HIGH.
_COMPETITION_BANDS: tuple[tuple[int, CompetitionLevel], ...] = (
    (3, CompetitionLevel.LOW),
    (6, CompetitionLevel.MEDIUM),
    (10, CompetitionLevel.HIGH),
)


def classify_competition(gym_count: int) -> CompetitionLevel:
    for upper, level in _COMPETITION_BANDS:
        if gym_count <= upper:
            return level
    return CompetitionLevel.VERY_HIGH


def demand_units(corporate_count: int, apartment_count: int) -> float:
    return corporate_count + APARTMENT_DEMAND_WEIGHT * apartment_count


def demand_supply_ratio(gym_count: int, corporate_count: int, apartment_count: int) -> float:
    """Demand units per gym. With no gyms the demand itself is returned."""
    return demand_units(corporate_count, apartment_count) / max(gym_count, 1)


def classify_market_gap(gym_count: int, corporate_count: int, apartment_count: int) -> MarketGap:
    if gym_count == 0:
        return MarketGap.UNTAPPED
    ratio = demand_supply_ratio(gym_count, corporate_count, apartment_count)
    if ratio > 4:
        return MarketGap.OPPORTUNITY
    if ratio > 2:
        return MarketGap.COMPETITIVE
    return MarketGap.SATURATED
