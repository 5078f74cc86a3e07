"""Suitability scoring strategies."""

from .count_based import CategoryCounts, score_counts, score_intelligence
from .distance_decay import score_reference_points

__all__ = ["CategoryCounts", "score_counts", "score_intelligence", "score_reference_points"]
