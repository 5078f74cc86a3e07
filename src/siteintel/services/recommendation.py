"""Templated strategy text built from an intelligence report and its scores."""

from __future__ import annotations

from typing import Optional

from ..models.domain import ScoringMatrix
from .intelligence.models import LocationIntelligence
from .scoring import score_intelligence

GOLD_MINE_THRESHOLD = 75
HIGH_POTENTIAL_THRESHOLD = 55
COMPETITIVE_THRESHOLD = 35

STRONG_CONNECTIVITY = 50
MODERATE_CONNECTIVITY = 20
STRONG_VIBE = 50

RESIDENTIAL_PEAK_THRESHOLD = 10
CORPORATE_LUNCH_THRESHOLD = 5


def headline_tier(gap_index: int) -> str:
    if gap_index >= GOLD_MINE_THRESHOLD:
        return "GOLD MINE"
    if gap_index >= HIGH_POTENTIAL_THRESHOLD:
        return "HIGH POTENTIAL"
    if gap_index >= COMPETITIVE_THRESHOLD:
        return "COMPETITIVE"
    return "SATURATED"


def generate_recommendation(intel: LocationIntelligence, scores: Optional[ScoringMatrix] = None) -> str:
    """Render the strategy text. Scores are derived from ``intel`` when omitted."""
    if scores is None:
        scores = score_intelligence(intel)

    gyms = intel.gyms
    apartments = intel.apartments.total
    cafes = intel.cafes
    corporates = intel.corporate_offices.total
    gap = scores.competitor_ratio
    demand = scores.demographic_load
    vibe = scores.infrastructure
    conn = scores.connectivity

    lines = ["GEO-GROUNDED STRATEGY", ""]
    if apartments > 0:
        lines.append(f"+ Residential Density: {apartments} apartment complexes nearby")
    if cafes.total > 0:
        lines.append(f"+ Lifestyle Synergy: {cafes.total} cafes ({cafes.health_focused} health-focused)")
    if intel.transit.total > 0:
        lines.append(
            f"+ Transit Access: {intel.transit.total} transit stops "
            f"({intel.transit.metro} metro, {intel.transit.bus} bus)"
        )
    if corporates > 0:
        lines.append(f"+ Office Proximity: {corporates} corporate/coworking offices")

    lines += ["", "STRATEGIC RECOMMENDATION", ""]
    tier = headline_tier(gap)
    if tier == "GOLD MINE":
        lines.append(f"GOLD MINE - Gap Index {gap}/100. Strong demand, low competition.")
        lines.append(f"- Demand score {demand}/100 backed by {apartments} apt complexes + {cafes.total} cafes")
        if gyms.total == 0:
            lines.append("- No direct competitors detected - first-mover advantage")
        else:
            lines.append(f"- Only {gyms.total} gym(s) serving this demand pool")
    elif tier == "HIGH POTENTIAL":
        lines.append(f"HIGH POTENTIAL - Gap Index {gap}/100. Room to capture market.")
        lines.append(f"- Demand score {demand}/100 - {apartments} residential complexes as primary catchment")
        if gyms.premium_count > gyms.budget_count:
            lines.append(f"- {gyms.premium_count} premium gyms dominate -> budget tier is underserved")
        else:
            lines.append(f"- {gyms.budget_count} budget gyms dominate -> premium segment has headroom")
    elif tier == "COMPETITIVE":
        lines.append(f"COMPETITIVE - Gap Index {gap}/100. Differentiation required.")
        lines.append(f"- {gyms.total} gyms already serving this area")
        vibe_note = (
            "strong youth culture -> niche positioning works"
            if vibe > STRONG_VIBE
            else "moderate lifestyle signals -> community-first strategy"
        )
        lines.append(f"- Vibe score {vibe}/100 - {vibe_note}")
        lines.append("- Consider: 24/7 access, women-only, CrossFit, or Pilates studio model")
    else:
        lines.append(f"SATURATED - Gap Index {gap}/100. High risk.")
        lines.append(f"- {gyms.total} gyms competing for {apartments} apt complexes - market is crowded")
        lines.append("- Consider a site 500m+ away, or a highly differentiated concept")

    if conn > STRONG_CONNECTIVITY:
        lines += ["", f"Connectivity {conn}/100 - good transit access supports walk-in traffic"]
    elif conn > MODERATE_CONNECTIVITY:
        lines += ["", f"Connectivity {conn}/100 - moderate access, parking availability matters"]

    lines += ["", "PEAK HOUR FIT"]
    if apartments > RESIDENTIAL_PEAK_THRESHOLD:
        lines.append("- Morning (6-9 AM) & Evening (6-9 PM) - residential catchment drives utilization")
    if corporates > CORPORATE_LUNCH_THRESHOLD:
        lines.append(f"- Lunch slots viable - {corporates} offices within radius")
    if apartments <= RESIDENTIAL_PEAK_THRESHOLD and corporates <= CORPORATE_LUNCH_THRESHOLD:
        lines.append("- No dominant peak - plan staffing around evening walk-ins")

    return "\n".join(lines) + "\n"


def format_intelligence_summary(intel: LocationIntelligence, scores: Optional[ScoringMatrix] = None) -> str:
    """Plain-text digest of an intelligence report for chat-style consumers."""
    gyms = intel.gyms
    lines = [
        "Area Analysis:",
        f"- Gyms: {gyms.total} ({gyms.high_rated} rated 4+, avg {gyms.average_rating})",
        f"- Corporate Offices: {intel.corporate_offices.total}",
        f"- Residential Complexes: {intel.apartments.total}",
        f"- Cafes: {intel.cafes.total} ({intel.cafes.health_focused} health-focused)",
        f"- Transit Stations: {intel.transit.total}",
        f"- Competition Level: {intel.competition_level.value}",
        f"- Market Opportunity: {intel.market_gap.value}",
        "",
        "Strategic Recommendation:",
        generate_recommendation(intel, scores),
    ]
    return "\n".join(lines)
