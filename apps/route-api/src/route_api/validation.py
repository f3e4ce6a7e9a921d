from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
from route_engine.models import CandidateLocation, GeoPoint

from route_api.errors import RequestValidationFailed
from route_api.schemas.routes import LocationPayload

MAX_LOCATIONS = 100

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RouteRequest:
    tenant_id: str
    origin: GeoPoint
    locations: list[CandidateLocation]


def parse_route_request(body: Any) -> RouteRequest:
    """Validate a decoded JSON body for the route calculation endpoint.

    Rules are checked in a fixed order and the first failure wins, so callers
    get one actionable message. Raises ``RequestValidationFailed``.
    """
    if not isinstance(body, dict):
        raise RequestValidationFailed("Request body must be a JSON object")

    tenant_id = _parse_tenant_id(body.get("tenantId"))

    origin_lat = body.get("originLat")
    origin_lon = body.get("originLon")
    if not _is_number(origin_lat) or not _is_number(origin_lon):
        raise RequestValidationFailed("Origin coordinates must be numbers")
    if not _is_valid_coordinate(origin_lat, origin_lon):
        raise RequestValidationFailed("Origin coordinates are out of range")

    locations = body.get("locations")
    if not isinstance(locations, list):
        raise RequestValidationFailed("locations must be an array")
    if not locations:
        raise RequestValidationFailed("locations must not be empty")
    if len(locations) > MAX_LOCATIONS:
        raise RequestValidationFailed(f"A maximum of {MAX_LOCATIONS} locations is allowed")

    candidates = [_parse_location(index, item) for index, item in enumerate(locations, start=1)]
    return RouteRequest(
        tenant_id=tenant_id,
        origin=GeoPoint(lat=float(origin_lat), lng=float(origin_lon)),
        locations=candidates,
    )


def _parse_tenant_id(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise RequestValidationFailed("tenantId is required")
    tenant_id = value.strip()
    if not _UUID_PATTERN.match(tenant_id):
        raise RequestValidationFailed("tenantId is invalid")
    return tenant_id.lower()


def _parse_location(index: int, item: Any) -> CandidateLocation:
    if not isinstance(item, dict):
        raise RequestValidationFailed(f"Location {index} is invalid")
    try:
        payload = LocationPayload.model_validate(item)
    except ValidationError as exc:
        raise RequestValidationFailed(f"Location {index} is invalid") from exc
    return CandidateLocation(
        name=payload.name,
        point=GeoPoint(lat=payload.latitude, lng=payload.longitude),
        address=payload.address,
        number=payload.number,
        neighborhood=payload.neighborhood,
        city=payload.city,
        state=payload.state,
        services=payload.services,
    )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _is_valid_coordinate(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180
