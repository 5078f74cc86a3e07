"""Single query per category."""

from __future__ import annotations

from .base import RawPlace, SpatialQueryStrategy, ZoneFetcher, raw_coordinates


class SingleZoneQuery(SpatialQueryStrategy):
    """One circular query at the full radius.

    Places the provider returns without coordinates are kept (they cannot be
    re-validated); places with coordinates outside the radius are dropped.
    """

    name = "single_zone"

    async def fetch(
        self,
        fetch_zone: ZoneFetcher,
        *,
        lat: float,
        lng: float,
        radius_m: float,
    ) -> list[RawPlace]:
        places = await fetch_zone(lat, lng, radius_m)
        return [
            place
            for place in places
            if raw_coordinates(place) is None or self._inside(place, lat, lng, radius_m)
        ]
