"""Post-fetch filters applied by callers of the places client."""

from __future__ import annotations

from typing import Iterable, Sequence

from ...models.domain import POIRecord

CORPORATE_BLOCKLIST: tuple[str, ...] = (
    "hotel", "mall", "hospital", "clinic", "school", "college", "university",
    "bank", "atm", "temple", "church", "mosque", "salon", "spa", "supermarket",
    "store", "restaurant", "cafe", "pharmacy", "medical", "court", "police",
    "government", "municipality", "apartment", "residency", "residences",
)

HEALTH_CAFE_KEYWORDS: tuple[str, ...] = ("health", "juice", "salad")


def exclude_by_name(places: Iterable[POIRecord], blocklist: Sequence[str] = CORPORATE_BLOCKLIST) -> list[POIRecord]:
    """Drop places whose display name contains any blocklisted word (case-insensitive)."""
    words = [word.lower() for word in blocklist]
    return [place for place in places if not any(word in place.display_name.lower() for word in words)]


def split_by_types(
    places: Iterable[POIRecord],
    types: Iterable[str],
) -> tuple[list[POIRecord], list[POIRecord]]:
    """Partition a merged result set into (places tagged with any of ``types``, the rest)."""
    wanted = frozenset(types)
    matched: list[POIRecord] = []
    others: list[POIRecord] = []
    for place in places:
        (matched if place.has_any_type(wanted) else others).append(place)
    return matched, others


def health_focused(places: Iterable[POIRecord], min_rating: float = 4.0) -> list[POIRecord]:
    return [
        place
        for place in places
        if place.rating is not None
        and place.rating >= min_rating
        and any(word in place.display_name.lower() for word in HEALTH_CAFE_KEYWORDS)
    ]
