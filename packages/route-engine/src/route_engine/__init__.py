"""Route ranking core package."""

from route_engine.aggregator import AggregatorSettings, ProviderOutcomeObserver, RouteAggregator
from route_engine.distance import haversine_distance_km, haversine_distance_meters
from route_engine.formatting import format_distance, format_duration
from route_engine.models import (
    CandidateLocation,
    GeoPoint,
    MatrixAvailable,
    MatrixOutcome,
    MatrixUnavailable,
    RankedCandidate,
    RouteLeg,
    RouteResult,
)
from route_engine.prefilter import prefilter_candidates
from route_engine.providers import MatrixProvider, PerDestinationMatrixProvider, SingleRouteClient

__all__ = [
    "AggregatorSettings",
    "CandidateLocation",
    "GeoPoint",
    "MatrixAvailable",
    "MatrixOutcome",
    "MatrixProvider",
    "MatrixUnavailable",
    "PerDestinationMatrixProvider",
    "ProviderOutcomeObserver",
    "RankedCandidate",
    "RouteAggregator",
    "RouteLeg",
    "RouteResult",
    "SingleRouteClient",
    "format_distance",
    "format_duration",
    "haversine_distance_km",
    "haversine_distance_meters",
    "prefilter_candidates",
]
