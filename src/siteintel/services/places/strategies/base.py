"""Base classes for spatial query strategy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Protocol

from ...geospatial import within_radius_m

RawPlace = dict[str, Any]


class ZoneFetcher(Protocol):
    """Issues one circular provider query and returns raw place payloads."""

    def __call__(self, lat: float, lng: float, radius_m: float) -> Awaitable[list[RawPlace]]: ...


def raw_coordinates(place: RawPlace) -> tuple[float, float] | None:
    location = place.get("location")
    if not isinstance(location, dict):
        return None
    lat = location.get("latitude")
    lng = location.get("longitude")
    if lat is None or lng is None:
        return None
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError):
        return None


def raw_identity(place: RawPlace) -> str | None:
    """Provider id, falling back to the display name text."""
    place_id = place.get("id")
    if isinstance(place_id, str) and place_id:
        return place_id
    display_name = place.get("displayName")
    if isinstance(display_name, dict):
        display_name = display_name.get("text")
    return display_name if isinstance(display_name, str) and display_name else None


class SpatialQueryStrategy(ABC):
    """Contract for turning one category query into one or more provider calls."""

    name: str

    @abstractmethod
    async def fetch(
        self,
        fetch_zone: ZoneFetcher,
        *,
        lat: float,
        lng: float,
        radius_m: float,
    ) -> list[RawPlace]:
        raise NotImplementedError

    @staticmethod
    def _inside(place: RawPlace, lat: float, lng: float, radius_m: float) -> bool:
        coords = raw_coordinates(place)
        return coords is not None and within_radius_m(lat, lng, coords[0], coords[1], radius_m)
