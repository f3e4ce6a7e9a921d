from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from route_engine.models import GeoPoint, MatrixAvailable, MatrixOutcome, RouteLeg

logger = logging.getLogger(__name__)


class MatrixProvider(ABC):
    """One-to-many travel cost source.

    Implementations report upstream problems as ``MatrixUnavailable`` instead of
    raising, so the aggregator can move on to the next provider.
    """

    provider_name: str

    @abstractmethod
    async def compute_matrix(self, origin: GeoPoint, destinations: list[GeoPoint]) -> MatrixOutcome:
        raise NotImplementedError


class SingleRouteClient(ABC):
    provider_name: str

    @abstractmethod
    async def compute_route(self, origin: GeoPoint, destination: GeoPoint) -> RouteLeg | None:
        raise NotImplementedError


class PerDestinationMatrixProvider(MatrixProvider):
    """Builds a matrix row out of concurrent one-to-one route requests.

    Always reports the row as available; destinations whose request failed are
    ``None``. Meant to be the last entry of the provider chain.
    """

    def __init__(self, route_client: SingleRouteClient) -> None:
        self._route_client = route_client
        self.provider_name = f"{route_client.provider_name}_single_route"

    async def compute_matrix(self, origin: GeoPoint, destinations: list[GeoPoint]) -> MatrixOutcome:
        legs = await asyncio.gather(
            *(self._route_client.compute_route(origin, destination) for destination in destinations),
            return_exceptions=True,
        )
        distances: list[float | None] = []
        durations: list[float | None] = []
        for index, leg in enumerate(legs):
            if isinstance(leg, BaseException):
                logger.warning(
                    "single_route_failed",
                    extra={"provider": self.provider_name, "index": index, "error": repr(leg)},
                )
                leg = None
            distances.append(leg.distance_meters if leg is not None else None)
            durations.append(leg.duration_seconds if leg is not None else None)
        return MatrixAvailable(
            source=self.provider_name,
            distances_meters=distances,
            durations_seconds=durations,
        )
