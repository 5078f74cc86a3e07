import pytest

from siteintel.models.domain import GeoPoint, LocationType
from siteintel.services.geospatial import haversine_km, points_within_radius, within_radius_m


def _point(pid: str, lat: float, lng: float) -> GeoPoint:
    return GeoPoint(id=pid, lat=lat, lng=lng, name=f"Point {pid}", category=LocationType.GYM)


def test_haversine_identity_and_symmetry():
    assert haversine_km(12.9121, 77.6446, 12.9121, 77.6446) == 0.0
    forward = haversine_km(12.9121, 77.6446, 12.9352, 77.6245)
    backward = haversine_km(12.9352, 77.6245, 12.9121, 77.6446)
    assert forward == pytest.approx(backward)
    assert forward > 0


def test_one_degree_of_latitude_is_about_111_km():
    assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.19, abs=0.01)


def test_triangle_inequality_holds():
    a = (12.9121, 77.6446)
    b = (12.9352, 77.6245)
    c = (12.8900, 77.6600)
    ab = haversine_km(*a, *b)
    bc = haversine_km(*b, *c)
    ac = haversine_km(*a, *c)
    assert ac <= ab + bc + 1e-9


def test_antipodal_points_do_not_fail():
    distance = haversine_km(0.0, 0.0, 0.0, 180.0)
    assert distance == pytest.approx(3.141592653589793 * 6371.0, rel=1e-6)


def test_within_radius_m_includes_boundary_and_rejects_far_points():
    assert within_radius_m(12.9121, 77.6446, 12.9121, 77.6446, 0.0)
    assert within_radius_m(12.9121, 77.6446, 12.9131, 77.6446, 1000.0)
    assert not within_radius_m(12.9121, 77.6446, 12.9352, 77.6245, 1000.0)


def test_points_within_radius_sorted_by_distance():
    points = [
        _point("far", 12.9300, 77.6446),
        _point("near", 12.9125, 77.6446),
        _point("outside", 13.5000, 77.6446),
    ]
    result = points_within_radius(12.9121, 77.6446, 3.0, points)

    assert [point.id for point, _ in result] == ["near", "far"]
    assert result[0][1] < result[1][1]
