"""Tests for great-circle distance helpers."""

import pytest

from fitmatch.matching.geo import bounding_box, haversine_km, within_range
from fitmatch.profile.models import GeoPoint


def test_haversine_zero_for_same_point():
    p = GeoPoint(latitude=10.0, longitude=20.0)
    assert haversine_km(p, p) == 0


def test_haversine_one_degree_of_latitude():
    a = GeoPoint(latitude=0.0, longitude=0.0)
    b = GeoPoint(latitude=1.0, longitude=0.0)

    assert haversine_km(a, b) == pytest.approx(111.195, abs=0.01)


def test_haversine_is_symmetric():
    a = GeoPoint(latitude=-34.6037, longitude=-58.3816)
    b = GeoPoint(latitude=40.4168, longitude=-3.7038)

    assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))


def test_within_range_includes_boundary():
    a = GeoPoint(latitude=0.0, longitude=0.0)
    b = GeoPoint(latitude=1.0, longitude=0.0)
    distance = haversine_km(a, b)

    assert within_range(a, b, distance)
    assert not within_range(a, b, distance - 0.001)


def test_bounding_box_contains_circle():
    origin = GeoPoint(latitude=-34.6037, longitude=-58.3816)
    min_lat, max_lat, min_lon, max_lon = bounding_box(origin, 10)

    assert min_lat < origin.latitude < max_lat
    assert min_lon < origin.longitude < max_lon
    north = GeoPoint(latitude=max_lat, longitude=origin.longitude)
    assert haversine_km(origin, north) == pytest.approx(10, abs=0.01)


def test_bounding_box_spans_all_longitudes_near_pole():
    origin = GeoPoint(latitude=89.99, longitude=0.0)
    _, max_lat, min_lon, max_lon = bounding_box(origin, 50)

    assert max_lat == 90.0
    assert (min_lon, max_lon) == (-180.0, 180.0)


def test_bounding_box_across_antimeridian_spans_all_longitudes():
    origin = GeoPoint(latitude=0.0, longitude=179.99)
    _, _, min_lon, max_lon = bounding_box(origin, 10)

    assert (min_lon, max_lon) == (-180.0, 180.0)
