"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Iterable, TypeVar

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0

_PointT = TypeVar("_PointT", bound=GeoPoint)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push `a` a hair past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def within_radius_m(center_lat: float, center_lng: float, lat: float, lng: float, radius_m: float) -> bool:
    """Return True if (lat, lng) lies on or inside the circle around the center."""

    return haversine_km(center_lat, center_lng, lat, lng) * 1000.0 <= radius_m


def points_within_radius(
    lat: float,
    lng: float,
    radius_km: float,
    points: Iterable[_PointT],
) -> list[tuple[_PointT, float]]:
    """Return (point, distance_km) pairs inside the radius, nearest first."""

    matches = []
    for point in points:
        distance = haversine_km(lat, lng, point.lat, point.lng)
        if distance <= radius_km:
            matches.append((point, distance))
    matches.sort(key=lambda item: item[1])
    return matches
