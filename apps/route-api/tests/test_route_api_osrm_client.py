from __future__ import annotations

import httpx
import pytest
from route_engine.models import GeoPoint, MatrixAvailable, MatrixUnavailable, RouteLeg

from route_api.clients.osrm_client import OSRMRouteClient, OSRMTableProvider, format_coordinates

ORIGIN = GeoPoint(lat=-23.5505, lng=-46.6333)
DESTINATIONS = [GeoPoint(lat=-23.56, lng=-46.64), GeoPoint(lat=-23.6, lng=-46.7)]


def _factory(handler):
    transport = httpx.MockTransport(handler)
    return lambda: httpx.AsyncClient(transport=transport, timeout=5.0)


def test_format_coordinates_uses_lng_lat_order() -> None:
    assert format_coordinates([ORIGIN, DESTINATIONS[0]]) == "-46.6333,-23.5505;-46.64,-23.56"


@pytest.mark.asyncio
async def test_osrm_table_drops_origin_column() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/table/v1/driving/-46.6333,-23.5505;-46.64,-23.56;-46.7,-23.6"
        assert request.url.params["sources"] == "0"
        assert request.url.params["annotations"] == "distance,duration"
        assert request.headers["user-agent"] == "RouteLocator/1.0"
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "distances": [[0, 1750.4, None]],
                "durations": [[0, 400.2, None]],
            },
        )

    provider = OSRMTableProvider(base_url="https://osrm.example.com/", client_factory=_factory(handler))
    outcome = await provider.compute_matrix(ORIGIN, DESTINATIONS)

    assert isinstance(outcome, MatrixAvailable)
    assert outcome.source == "osrm"
    assert outcome.distances_meters == [1750.4, None]
    assert outcome.durations_seconds == [400.2, None]


@pytest.mark.asyncio
async def test_osrm_table_error_code_is_unavailable() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "InvalidQuery"})

    provider = OSRMTableProvider(base_url="https://osrm.example.com", client_factory=_factory(handler))
    outcome = await provider.compute_matrix(ORIGIN, DESTINATIONS)

    assert isinstance(outcome, MatrixUnavailable)
    assert "InvalidQuery" in outcome.reason


@pytest.mark.asyncio
async def test_osrm_table_http_error_is_unavailable() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"message": "slow down"})

    provider = OSRMTableProvider(base_url="https://osrm.example.com", client_factory=_factory(handler))
    outcome = await provider.compute_matrix(ORIGIN, DESTINATIONS)

    assert isinstance(outcome, MatrixUnavailable)
    assert outcome.reason == "http 429"


@pytest.mark.asyncio
async def test_osrm_table_size_mismatch_is_unavailable() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "Ok", "distances": [[0, 10.0]], "durations": [[0, 5.0]]})

    provider = OSRMTableProvider(base_url="https://osrm.example.com", client_factory=_factory(handler))
    outcome = await provider.compute_matrix(ORIGIN, DESTINATIONS)

    assert isinstance(outcome, MatrixUnavailable)
    assert outcome.reason == "matrix size mismatch"


@pytest.mark.asyncio
async def test_osrm_route_returns_leg() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/route/v1/driving/-46.6333,-23.5505;-46.64,-23.56"
        assert request.url.params["overview"] == "false"
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 2100.0, "duration": 480.0}]})

    client = OSRMRouteClient(base_url="https://osrm.example.com", client_factory=_factory(handler))
    leg = await client.compute_route(ORIGIN, DESTINATIONS[0])

    assert leg == RouteLeg(distance_meters=2100.0, duration_seconds=480.0)


@pytest.mark.asyncio
async def test_osrm_route_failure_resolves_to_none() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "routes": []})

    client = OSRMRouteClient(base_url="https://osrm.example.com", client_factory=_factory(handler))

    assert await client.compute_route(ORIGIN, DESTINATIONS[0]) is None


@pytest.mark.asyncio
async def test_osrm_route_timeout_resolves_to_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = OSRMRouteClient(base_url="https://osrm.example.com", client_factory=_factory(handler))

    assert await client.compute_route(ORIGIN, DESTINATIONS[0]) is None
