import pytest

from siteintel.models.domain import LatLng, POIRecord, ScoringMatrix
from siteintel.services.intelligence import build_intelligence
from siteintel.services.recommendation import (
    format_intelligence_summary,
    generate_recommendation,
    headline_tier,
)
from siteintel.services.scoring import score_intelligence


def _places(prefix: str, count: int, **extra) -> list[POIRecord]:
    return [
        POIRecord(
            id=f"{prefix}{index}",
            display_name=f"{prefix.title()} {index}",
            location=LatLng(lat=12.9121, lng=77.6446),
            **extra,
        )
        for index in range(count)
    ]


def _intel(gyms=0, corporates=0, apartments=0, cafes=0, transit=0, **gym_extra):
    return build_intelligence(
        gyms=_places("gym", gyms, **gym_extra),
        corporates_raw=_places("office", corporates),
        cafes=_places("cafe", cafes),
        transit=_places("stop", transit, types=("subway_station",)),
        apartments=_places("tower", apartments),
        vibe=[],
    )


def _scores(gap: int, demand: int = 50, conn: int = 10, vibe: int = 30) -> ScoringMatrix:
    return ScoringMatrix(
        demographic_load=demand,
        connectivity=conn,
        competitor_ratio=gap,
        infrastructure=vibe,
        total=50,
    )


@pytest.mark.parametrize(
    ("gap", "tier"),
    [
        (100, "GOLD MINE"),
        (75, "GOLD MINE"),
        (74, "HIGH POTENTIAL"),
        (55, "HIGH POTENTIAL"),
        (54, "COMPETITIVE"),
        (35, "COMPETITIVE"),
        (34, "SATURATED"),
        (0, "SATURATED"),
    ],
)
def test_headline_tier_bands(gap, tier):
    assert headline_tier(gap) == tier


def test_gold_mine_without_competitors():
    text = generate_recommendation(_intel(apartments=12, cafes=4), _scores(gap=90))

    assert text.startswith("GEO-GROUNDED STRATEGY")
    assert "GOLD MINE - Gap Index 90/100" in text
    assert "first-mover advantage" in text
    assert "12 apartment complexes nearby" in text
    assert text.endswith("\n")


def test_high_potential_names_underserved_tier():
    intel = _intel(gyms=3, apartments=5, price_level="PRICE_LEVEL_EXPENSIVE")

    text = generate_recommendation(intel, _scores(gap=60))

    assert "HIGH POTENTIAL" in text
    assert "budget tier is underserved" in text


def test_competitive_and_saturated_advice():
    competitive = generate_recommendation(_intel(gyms=5), _scores(gap=40, vibe=70))
    saturated = generate_recommendation(_intel(gyms=12, apartments=3), _scores(gap=5))

    assert "strong youth culture" in competitive
    assert "Differentiation required" in competitive
    assert "SATURATED - Gap Index 5/100" in saturated
    assert "12 gyms competing for 3 apt complexes" in saturated


def test_connectivity_note_thresholds():
    assert "good transit access" in generate_recommendation(_intel(), _scores(gap=40, conn=60))
    assert "parking availability" in generate_recommendation(_intel(), _scores(gap=40, conn=30))
    assert "Connectivity" not in generate_recommendation(_intel(), _scores(gap=40, conn=20))


def test_peak_hour_guidance():
    busy = generate_recommendation(_intel(apartments=11, corporates=6), _scores(gap=60))
    quiet = generate_recommendation(_intel(apartments=10, corporates=5), _scores(gap=60))

    assert "Morning (6-9 AM)" in busy
    assert "Lunch slots viable - 6 offices" in busy
    assert "No dominant peak" in quiet
    assert "Morning" not in quiet


def test_scores_are_derived_when_omitted():
    intel = _intel(gyms=2, corporates=8, apartments=14, cafes=6, transit=2)

    assert generate_recommendation(intel) == generate_recommendation(intel, score_intelligence(intel))


def test_intelligence_summary_lists_counts():
    intel = _intel(gyms=2, corporates=8, apartments=4, rating=4.5)

    summary = format_intelligence_summary(intel)

    assert "- Gyms: 2 (2 rated 4+, avg 4.5)" in summary
    assert "- Corporate Offices: 8" in summary
    assert "- Competition Level: LOW" in summary
    assert "- Market Opportunity: OPPORTUNITY" in summary
    assert "STRATEGIC RECOMMENDATION" in summary
