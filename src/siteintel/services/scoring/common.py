"""Shared helpers for scoring strategies."""

from __future__ import annotations

import math

from ...models.domain import ScoringMatrix


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def log_norm(count: float, saturation: float) -> float:
    """Diminishing-returns scale: ``saturation`` maps to 100, zero maps to 0."""
    if count <= 0:
        return 0.0
    return math.log1p(count) / math.log1p(saturation) * 100.0


def build_matrix(
    demographic_load: float,
    connectivity: float,
    competitor_ratio: float,
    infrastructure: float,
    weights: dict[str, float],
) -> ScoringMatrix:
    """Clamp sub-scores, combine them on float precision and round for display."""
    parts = {
        "demographic_load": clamp(demographic_load),
        "connectivity": clamp(connectivity),
        "competitor_ratio": clamp(competitor_ratio),
        "infrastructure": clamp(infrastructure),
    }
    total = clamp(sum(parts[name] * weight for name, weight in weights.items()))
    return ScoringMatrix(
        demographic_load=round(parts["demographic_load"]),
        connectivity=round(parts["connectivity"]),
        competitor_ratio=round(parts["competitor_ratio"]),
        infrastructure=round(parts["infrastructure"]),
        total=round(total),
    )
