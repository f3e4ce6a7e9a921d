from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
from route_engine.models import GeoPoint, MatrixAvailable, MatrixOutcome, MatrixUnavailable
from route_engine.providers import MatrixProvider

logger = logging.getLogger(__name__)

DEFAULT_DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"


class GoogleDistanceMatrixProvider(MatrixProvider):
    """Primary driving-distance matrix backed by the Google Distance Matrix API."""

    provider_name = "google"

    def __init__(
        self,
        api_key: str | None,
        url: str = DEFAULT_DISTANCE_MATRIX_URL,
        language: str = "pt-BR",
        timeout_seconds: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._language = language
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    async def compute_matrix(self, origin: GeoPoint, destinations: list[GeoPoint]) -> MatrixOutcome:
        if not self._api_key:
            return self._unavailable("api key not configured")
        if not destinations:
            return MatrixAvailable(source=self.provider_name, distances_meters=[], durations_seconds=[])

        params = {
            "origins": f"{origin.lat},{origin.lng}",
            "destinations": "|".join(f"{point.lat},{point.lng}" for point in destinations),
            "mode": "driving",
            "language": self._language,
            "key": self._api_key,
        }
        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
            async with factory() as client:
                response = await client.get(self._url, params=params)
                response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            return self._unavailable("timeout")
        except httpx.HTTPStatusError as exc:
            return self._unavailable(f"http {exc.response.status_code}")
        except httpx.HTTPError as exc:
            return self._unavailable(f"transport error: {exc.__class__.__name__}")
        except ValueError:
            return self._unavailable("invalid json")

        status = payload.get("status") if isinstance(payload, dict) else None
        if status != "OK":
            return self._unavailable(f"status {status}")
        try:
            elements = payload["rows"][0]["elements"]
        except (KeyError, IndexError, TypeError):
            return self._unavailable("malformed response")
        if not isinstance(elements, list) or len(elements) != len(destinations):
            return self._unavailable("malformed response")

        distances: list[float | None] = []
        durations: list[float | None] = []
        for element in elements:
            distance, duration = _read_element(element)
            distances.append(distance)
            durations.append(duration)

        logger.info(
            "distance_matrix_resolved",
            extra={
                "provider": self.provider_name,
                "resolved": sum(1 for value in distances if value is not None),
                "requested": len(destinations),
            },
        )
        return MatrixAvailable(source=self.provider_name, distances_meters=distances, durations_seconds=durations)

    def _unavailable(self, reason: str) -> MatrixUnavailable:
        logger.warning("distance_matrix_unavailable", extra={"provider": self.provider_name, "reason": reason})
        return MatrixUnavailable(source=self.provider_name, reason=reason)


def _read_element(element: Any) -> tuple[float | None, float | None]:
    if not isinstance(element, dict) or element.get("status") != "OK":
        return None, None
    distance = (element.get("distance") or {}).get("value")
    duration = (element.get("duration") or {}).get("value")
    if not isinstance(distance, (int, float)) or not isinstance(duration, (int, float)):
        return None, None
    return float(distance), float(duration)
