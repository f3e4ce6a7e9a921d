from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from route_engine.models import (
    CandidateLocation,
    GeoPoint,
    MatrixAvailable,
    MatrixOutcome,
    MatrixUnavailable,
    RankedCandidate,
    RouteResult,
)
from route_engine.prefilter import DEFAULT_PREFILTER_MAX_DISTANCE_KM, prefilter_candidates
from route_engine.providers import MatrixProvider

logger = logging.getLogger(__name__)


class ProviderOutcomeObserver(Protocol):
    def observe_provider(self, provider: str, outcome: str) -> None: ...


@dataclass(frozen=True)
class AggregatorSettings:
    prefilter_max_distance_km: float = DEFAULT_PREFILTER_MAX_DISTANCE_KM
    max_candidates: int = 20
    batch_size: int = 10
    batch_delay_seconds: float = 0.2

    def __post_init__(self) -> None:
        if self.max_candidates <= 0:
            raise ValueError("max_candidates must be > 0")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        if self.batch_delay_seconds < 0:
            raise ValueError("batch_delay_seconds must be >= 0")


class RouteAggregator:
    """Ranks candidate locations by routed driving distance from an origin.

    Candidates are narrowed with a straight-line pre-filter, capped, and sent
    to the providers in fixed-size batches. Each batch walks the provider
    chain in order and keeps the first available matrix. Batches run one after
    another with a pause in between so upstream rate limits are not tripped.
    A batch no provider could serve simply contributes no results.
    """

    def __init__(
        self,
        providers: Sequence[MatrixProvider],
        settings: AggregatorSettings | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
        observer: ProviderOutcomeObserver | None = None,
    ) -> None:
        if not providers:
            raise ValueError("at least one matrix provider is required")
        self._providers = list(providers)
        self._settings = settings or AggregatorSettings()
        self._sleep_fn = sleep_fn
        self._observer = observer

    async def aggregate(
        self,
        origin: GeoPoint,
        candidates: Sequence[CandidateLocation],
    ) -> list[RouteResult]:
        settings = self._settings
        ranked = prefilter_candidates(origin, candidates, settings.prefilter_max_distance_km)
        logger.info(
            "route_prefilter_done",
            extra={
                "component": "route_engine",
                "received": len(candidates),
                "within_cutoff": len(ranked),
                "cutoff_km": settings.prefilter_max_distance_km,
            },
        )
        if not ranked:
            return []

        selected = ranked[: settings.max_candidates]
        batches = [
            selected[start : start + settings.batch_size]
            for start in range(0, len(selected), settings.batch_size)
        ]

        results: list[RouteResult] = []
        for number, batch in enumerate(batches, start=1):
            if number > 1 and settings.batch_delay_seconds > 0:
                await self._sleep_fn(settings.batch_delay_seconds)
            batch_results = await self._route_batch(origin, batch)
            logger.info(
                "route_batch_done",
                extra={
                    "component": "route_engine",
                    "batch": number,
                    "batches": len(batches),
                    "size": len(batch),
                    "resolved": len(batch_results),
                },
            )
            results.extend(batch_results)

        results.sort(key=lambda item: item.distance_km)
        return results

    async def _route_batch(self, origin: GeoPoint, batch: list[RankedCandidate]) -> list[RouteResult]:
        destinations = [item.candidate.point for item in batch]
        for provider in self._providers:
            outcome = await self._try_provider(provider, origin, destinations)
            if isinstance(outcome, MatrixAvailable):
                return self._to_results(batch, outcome)
            logger.warning(
                "route_provider_unavailable",
                extra={"component": "route_engine", "provider": outcome.source, "reason": outcome.reason},
            )
        logger.error(
            "route_batch_unresolved",
            extra={"component": "route_engine", "size": len(batch)},
        )
        return []

    async def _try_provider(
        self,
        provider: MatrixProvider,
        origin: GeoPoint,
        destinations: list[GeoPoint],
    ) -> MatrixOutcome:
        try:
            outcome = await provider.compute_matrix(origin, destinations)
        except Exception as exc:
            logger.exception(
                "route_provider_crashed",
                extra={"component": "route_engine", "provider": provider.provider_name},
            )
            outcome = MatrixUnavailable(source=provider.provider_name, reason=f"unexpected error: {exc!r}")
        if isinstance(outcome, MatrixAvailable) and (
            len(outcome.distances_meters) != len(destinations)
            or len(outcome.durations_seconds) != len(destinations)
        ):
            outcome = MatrixUnavailable(source=outcome.source, reason="matrix size mismatch")
        if self._observer is not None:
            label = "available" if isinstance(outcome, MatrixAvailable) else "unavailable"
            self._observer.observe_provider(provider.provider_name, label)
        return outcome

    def _to_results(self, batch: list[RankedCandidate], matrix: MatrixAvailable) -> list[RouteResult]:
        results: list[RouteResult] = []
        for item, distance, duration in zip(batch, matrix.distances_meters, matrix.durations_seconds):
            if not _is_usable(distance) or not _is_usable(duration):
                continue
            results.append(
                RouteResult(
                    candidate=item.candidate,
                    distance_km=distance / 1000,
                    duration_minutes=duration / 60,
                    source=matrix.source,
                )
            )
        return results


def _is_usable(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value >= 0
