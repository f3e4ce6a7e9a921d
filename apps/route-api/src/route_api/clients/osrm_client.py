from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
from route_engine.models import GeoPoint, MatrixAvailable, MatrixOutcome, MatrixUnavailable, RouteLeg
from route_engine.providers import MatrixProvider, SingleRouteClient

logger = logging.getLogger(__name__)

DEFAULT_OSRM_BASE_URL = "https://router.project-osrm.org"


def format_coordinates(points: list[GeoPoint]) -> str:
    """OSRM expects ``lng,lat`` pairs joined by ``;``."""
    return ";".join(f"{point.lng},{point.lat}" for point in points)


class _OSRMHttp:
    def __init__(
        self,
        base_url: str,
        profile: str,
        user_agent: str,
        timeout_seconds: float,
        client_factory: Callable[[], httpx.AsyncClient] | None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._profile = profile
        self._headers = {"User-Agent": user_agent}
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    async def get(self, service: str, points: list[GeoPoint], params: dict[str, str]) -> dict[str, Any]:
        """Call an OSRM service. Raises ``httpx.HTTPError`` or ``ValueError`` on failure."""
        url = f"{self._base_url}/{service}/v1/{self._profile}/{format_coordinates(points)}"
        factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
        async with factory() as client:
            response = await client.get(url, params=params, headers=self._headers)
            response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("unexpected OSRM payload")
        if payload.get("code") != "Ok":
            raise ValueError(f"OSRM code {payload.get('code')}")
        return payload


class OSRMTableProvider(MatrixProvider):
    """Keyless fallback matrix using the OSRM ``table`` service."""

    provider_name = "osrm"

    def __init__(
        self,
        base_url: str = DEFAULT_OSRM_BASE_URL,
        profile: str = "driving",
        user_agent: str = "RouteLocator/1.0",
        timeout_seconds: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._http = _OSRMHttp(base_url, profile, user_agent, timeout_seconds, client_factory)

    async def compute_matrix(self, origin: GeoPoint, destinations: list[GeoPoint]) -> MatrixOutcome:
        if not destinations:
            return MatrixAvailable(source=self.provider_name, distances_meters=[], durations_seconds=[])
        params = {"sources": "0", "annotations": "distance,duration"}
        try:
            payload = await self._http.get("table", [origin, *destinations], params)
            # row 0 is the origin; its first column is origin -> origin
            distances = list(payload["distances"][0][1:])
            durations = list(payload["durations"][0][1:])
        except httpx.TimeoutException:
            return self._unavailable("timeout")
        except httpx.HTTPStatusError as exc:
            return self._unavailable(f"http {exc.response.status_code}")
        except httpx.HTTPError as exc:
            return self._unavailable(f"transport error: {exc.__class__.__name__}")
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            return self._unavailable(str(exc) or exc.__class__.__name__)

        if len(distances) != len(destinations) or len(durations) != len(destinations):
            return self._unavailable("matrix size mismatch")
        logger.info(
            "distance_matrix_resolved",
            extra={
                "provider": self.provider_name,
                "resolved": sum(1 for value in distances if value is not None),
                "requested": len(destinations),
            },
        )
        return MatrixAvailable(
            source=self.provider_name,
            distances_meters=[_as_float(value) for value in distances],
            durations_seconds=[_as_float(value) for value in durations],
        )

    def _unavailable(self, reason: str) -> MatrixUnavailable:
        logger.warning("distance_matrix_unavailable", extra={"provider": self.provider_name, "reason": reason})
        return MatrixUnavailable(source=self.provider_name, reason=reason)


class OSRMRouteClient(SingleRouteClient):
    """One-to-one OSRM ``route`` lookup; any failure resolves to ``None``."""

    provider_name = "osrm"

    def __init__(
        self,
        base_url: str = DEFAULT_OSRM_BASE_URL,
        profile: str = "driving",
        user_agent: str = "RouteLocator/1.0",
        timeout_seconds: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._http = _OSRMHttp(base_url, profile, user_agent, timeout_seconds, client_factory)

    async def compute_route(self, origin: GeoPoint, destination: GeoPoint) -> RouteLeg | None:
        try:
            payload = await self._http.get("route", [origin, destination], {"overview": "false"})
            route = payload["routes"][0]
            return RouteLeg(distance_meters=float(route["distance"]), duration_seconds=float(route["duration"]))
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning(
                "single_route_unavailable",
                extra={"provider": self.provider_name, "error": exc.__class__.__name__},
            )
            return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
