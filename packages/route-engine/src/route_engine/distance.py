import math

from route_engine.models import GeoPoint

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_METERS = EARTH_RADIUS_KM * 1000


def haversine_distance_meters(start: GeoPoint, end: GeoPoint) -> float:
    start_lat = math.radians(start.lat)
    end_lat = math.radians(end.lat)
    delta_lat = math.radians(end.lat - start.lat)
    delta_lng = math.radians(end.lng - start.lng)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(start_lat) * math.cos(end_lat) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def haversine_distance_km(start: GeoPoint, end: GeoPoint) -> float:
    return haversine_distance_meters(start, end) / 1000
