from __future__ import annotations

import pytest

from route_api.errors import RequestValidationFailed
from route_api.validation import MAX_LOCATIONS, parse_route_request

TENANT_ID = "3f2b8c1e-9a4d-4e7b-8c2a-1d5e6f7a8b9c"


def _location(**overrides) -> dict:
    payload = {"name": "Clinic", "latitude": -23.55, "longitude": -46.63}
    payload.update(overrides)
    return payload


def _body(**overrides) -> dict:
    body = {
        "tenantId": TENANT_ID,
        "originLat": -23.5505,
        "originLon": -46.6333,
        "locations": [_location()],
    }
    body.update(overrides)
    return body


def _message(body) -> str:
    with pytest.raises(RequestValidationFailed) as exc_info:
        parse_route_request(body)
    assert exc_info.value.status_code == 400
    return exc_info.value.message


def test_parse_route_request_accepts_valid_body() -> None:
    request = parse_route_request(
        _body(
            tenantId=TENANT_ID.upper(),
            locations=[_location(city="Sao Paulo", services="vaccines", unknownField="ignored")],
        )
    )

    assert request.tenant_id == TENANT_ID
    assert request.origin.lat == -23.5505
    assert request.origin.lng == -46.6333
    assert request.locations[0].city == "Sao Paulo"
    assert request.locations[0].services == "vaccines"
    assert request.locations[0].address is None


def test_parse_route_request_accepts_integer_coordinates() -> None:
    request = parse_route_request(_body(originLat=-23, originLon=-46, locations=[_location(latitude=-23, longitude=-46)]))

    assert request.origin.lat == -23.0
    assert request.locations[0].point.lng == -46.0


def test_parse_route_request_rejects_non_object_body() -> None:
    assert _message([1, 2, 3]) == "Request body must be a JSON object"


def test_parse_route_request_distinguishes_missing_and_malformed_tenant() -> None:
    body = _body()
    del body["tenantId"]

    assert _message(body) == "tenantId is required"
    assert _message(_body(tenantId="  ")) == "tenantId is required"
    assert _message(_body(tenantId="not-a-uuid")) == "tenantId is invalid"


def test_parse_route_request_checks_origin_types_before_range() -> None:
    assert _message(_body(originLat="-23.5")) == "Origin coordinates must be numbers"
    assert _message(_body(originLon=True)) == "Origin coordinates must be numbers"
    assert _message(_body(originLat=95)) == "Origin coordinates are out of range"
    assert _message(_body(originLon=-181.0)) == "Origin coordinates are out of range"


def test_parse_route_request_rejects_non_finite_origin() -> None:
    assert _message(_body(originLat=float("nan"))) == "Origin coordinates must be numbers"


def test_parse_route_request_validates_location_list() -> None:
    assert _message(_body(locations={"name": "x"})) == "locations must be an array"
    assert _message(_body(locations=[])) == "locations must not be empty"


def test_parse_route_request_caps_location_count() -> None:
    accepted = parse_route_request(_body(locations=[_location() for _ in range(MAX_LOCATIONS)]))
    assert len(accepted.locations) == MAX_LOCATIONS

    message = _message(_body(locations=[_location() for _ in range(MAX_LOCATIONS + 1)]))
    assert message == "A maximum of 100 locations is allowed"


def test_parse_route_request_reports_first_invalid_location_one_based() -> None:
    locations = [_location(), _location(), _location(latitude="12"), _location(name="")]

    assert _message(_body(locations=locations)) == "Location 3 is invalid"


@pytest.mark.parametrize(
    "location",
    [
        _location(name=""),
        _location(name="x" * 201),
        _location(latitude=91.0),
        _location(longitude=181),
        _location(latitude=None),
        _location(city="x" * 201),
        _location(services=123),
        "Clinic",
    ],
)
def test_parse_route_request_rejects_invalid_location(location) -> None:
    assert _message(_body(locations=[location])) == "Location 1 is invalid"


def test_parse_route_request_accepts_boundary_string_length() -> None:
    request = parse_route_request(_body(locations=[_location(name="x" * 200, address="y" * 200)]))

    assert len(request.locations[0].name) == 200
