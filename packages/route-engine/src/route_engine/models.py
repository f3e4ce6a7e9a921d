from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class CandidateLocation:
    name: str
    point: GeoPoint
    address: str | None = None
    number: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    services: str | None = None


@dataclass(frozen=True)
class RankedCandidate:
    """A candidate paired with its straight-line distance from the origin."""

    candidate: CandidateLocation
    haversine_km: float


@dataclass(frozen=True)
class RouteLeg:
    distance_meters: float
    duration_seconds: float


@dataclass(frozen=True)
class RouteResult:
    candidate: CandidateLocation
    distance_km: float
    duration_minutes: float
    source: str


@dataclass(frozen=True)
class MatrixAvailable:
    """One-to-many matrix row. ``None`` marks an unreachable destination."""

    source: str
    distances_meters: list[float | None]
    durations_seconds: list[float | None]


@dataclass(frozen=True)
class MatrixUnavailable:
    source: str
    reason: str


MatrixOutcome = MatrixAvailable | MatrixUnavailable
