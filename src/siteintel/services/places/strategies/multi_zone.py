"""Center plus four quadrant sub-queries, for areas dense enough to hit the page cap."""

from __future__ import annotations

import asyncio
import logging

from .base import RawPlace, SpatialQueryStrategy, ZoneFetcher, raw_identity

# Quadrant centers sit roughly 0.6 radius away from the site on each axis.
ZONE_OFFSET_DEGREES_PER_METER = 0.0000055

logger = logging.getLogger(__name__)


class MultiZoneQuery(SpatialQueryStrategy):
    """Fan a category out to five overlapping circles and merge the results.

    Candidates are deduplicated by id (display name when the id is missing)
    and must carry coordinates inside the true radius; the provider's circle
    filter is approximate at zone boundaries.
    """

    name = "multi_zone"

    def __init__(self, sub_radius_factor: float = 0.7) -> None:
        if not 0 < sub_radius_factor <= 1:
            raise ValueError("sub_radius_factor must be in (0, 1]")
        self.sub_radius_factor = sub_radius_factor

    def zones(self, lat: float, lng: float, radius_m: float) -> list[tuple[float, float, float]]:
        offset = radius_m * ZONE_OFFSET_DEGREES_PER_METER
        sub_radius = radius_m * self.sub_radius_factor
        return [
            (lat, lng, radius_m),
            (lat + offset, lng + offset, sub_radius),
            (lat + offset, lng - offset, sub_radius),
            (lat - offset, lng + offset, sub_radius),
            (lat - offset, lng - offset, sub_radius),
        ]

    async def fetch(
        self,
        fetch_zone: ZoneFetcher,
        *,
        lat: float,
        lng: float,
        radius_m: float,
    ) -> list[RawPlace]:
        zones = self.zones(lat, lng, radius_m)
        results = await asyncio.gather(
            *(fetch_zone(zone_lat, zone_lng, zone_radius) for zone_lat, zone_lng, zone_radius in zones),
            return_exceptions=True,
        )

        failures = [result for result in results if isinstance(result, BaseException)]
        if len(failures) == len(zones):
            raise failures[0]
        for failure in failures:
            logger.warning(f"Zone query failed, continuing with remaining zones: {failure}")

        seen: set[str] = set()
        merged: list[RawPlace] = []
        for result in results:
            if isinstance(result, BaseException):
                continue
            for place in result:
                place_id = raw_identity(place)
                if not place_id or place_id in seen:
                    continue
                if not self._inside(place, lat, lng, radius_m):
                    continue
                seen.add(place_id)
                merged.append(place)
        logger.debug(f"Multi-zone merge: {sum(len(r) for r in results if isinstance(r, list))} raw -> {len(merged)} unique")
        return merged
