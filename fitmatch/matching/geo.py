"""Great-circle distance helpers."""

import math

from fitmatch.profile.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Distance between two points along the Earth's surface, in km."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def within_range(a: GeoPoint, b: GeoPoint, max_km: float) -> bool:
    return haversine_km(a, b) <= max_km


def bounding_box(origin: GeoPoint, radius_km: float) -> tuple[float, float, float, float]:
    """Lat/lon box enclosing the circle around origin.

    Returns:
        (min_lat, max_lat, min_lon, max_lon). Longitude spans the full range
        near the poles or when the box would wrap the antimeridian.
    """
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(-90.0, origin.latitude - d_lat)
    max_lat = min(90.0, origin.latitude + d_lat)

    cos_lat = math.cos(math.radians(origin.latitude))
    if cos_lat < 1e-9 or min_lat <= -90.0 or max_lat >= 90.0:
        return min_lat, max_lat, -180.0, 180.0

    d_lon = math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    min_lon = origin.longitude - d_lon
    max_lon = origin.longitude + d_lon
    if min_lon < -180.0 or max_lon > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, min_lon, max_lon
