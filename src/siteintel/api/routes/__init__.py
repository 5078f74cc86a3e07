"""Route group exports."""

from . import cache, health, intelligence, places, scores

__all__ = ["cache", "health", "intelligence", "places", "scores"]
