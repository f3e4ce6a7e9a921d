from __future__ import annotations

from collections.abc import Iterable

from route_engine.distance import haversine_distance_km
from route_engine.models import CandidateLocation, GeoPoint, RankedCandidate

DEFAULT_PREFILTER_MAX_DISTANCE_KM = 60.0


def prefilter_candidates(
    origin: GeoPoint,
    candidates: Iterable[CandidateLocation],
    max_distance_km: float = DEFAULT_PREFILTER_MAX_DISTANCE_KM,
) -> list[RankedCandidate]:
    """Keep candidates within ``max_distance_km`` in a straight line, closest first.

    This bounds how many candidates reach the paid routing providers. It is an
    approximation of road distance, so the cutoff should sit comfortably above
    whatever road-distance cutoff callers apply afterwards.
    """
    if max_distance_km < 0:
        raise ValueError("max_distance_km must be >= 0")
    ranked = [
        RankedCandidate(candidate=candidate, haversine_km=haversine_distance_km(origin, candidate.point))
        for candidate in candidates
    ]
    kept = [item for item in ranked if item.haversine_km <= max_distance_km]
    kept.sort(key=lambda item: item.haversine_km)
    return kept
