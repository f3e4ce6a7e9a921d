import math

import pytest

from route_engine.distance import EARTH_RADIUS_KM, haversine_distance_km, haversine_distance_meters
from route_engine.models import GeoPoint


def test_haversine_distance_is_zero_for_same_point() -> None:
    point = GeoPoint(lat=-23.55, lng=-46.63)
    assert haversine_distance_meters(point, point) == 0.0


def test_haversine_matches_closed_form_for_latitude_offset() -> None:
    start = GeoPoint(lat=-23.55, lng=-46.63)
    end = GeoPoint(lat=-23.45, lng=-46.63)
    expected_km = EARTH_RADIUS_KM * math.radians(0.1)

    distance_km = haversine_distance_km(start, end)

    assert distance_km == pytest.approx(expected_km, rel=1e-6)
    assert distance_km == pytest.approx(11.12, abs=0.01)


def test_haversine_is_symmetric() -> None:
    se = GeoPoint(lat=-23.5505, lng=-46.6333)
    campinas = GeoPoint(lat=-22.9056, lng=-47.0608)
    assert haversine_distance_km(se, campinas) == pytest.approx(haversine_distance_km(campinas, se))
    assert 80 < haversine_distance_km(se, campinas) < 90
