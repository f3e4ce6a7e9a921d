from __future__ import annotations

from locator_devkit.db import AsyncDatabaseManager
from locator_devkit.redis import create_redis_client
from route_engine.aggregator import AggregatorSettings, RouteAggregator
from route_engine.providers import PerDestinationMatrixProvider

from route_api.clients.google_matrix_client import GoogleDistanceMatrixProvider
from route_api.clients.osrm_client import OSRMRouteClient, OSRMTableProvider
from route_api.observability import PrometheusApiMetricsCollector
from route_api.rate_limit import (
    FixedWindowRateLimiter,
    InMemoryRateLimitStore,
    RateLimitStore,
    RedisRateLimitStore,
)
from route_api.settings import RouteApiSettings, get_settings
from route_api.tenants import InMemoryTenantStore, SqlTenantStore, TenantAuthorizer, TenantStore

_settings = get_settings()


def _build_rate_limit_store(settings: RouteApiSettings) -> RateLimitStore:
    redis_client = create_redis_client(settings.REDIS_URL)
    if redis_client is None:
        return InMemoryRateLimitStore()
    return RedisRateLimitStore(redis_client)


def _build_tenant_store(settings: RouteApiSettings) -> TenantStore | None:
    if settings.DATABASE_URL:
        return SqlTenantStore(AsyncDatabaseManager(settings.DATABASE_URL))
    active = settings.active_tenant_ids()
    if active:
        return InMemoryTenantStore(active)
    return None


def _build_aggregator(settings: RouteApiSettings, metrics: PrometheusApiMetricsCollector) -> RouteAggregator:
    providers = [
        GoogleDistanceMatrixProvider(
            api_key=settings.GOOGLE_MAPS_API_KEY,
            url=settings.GOOGLE_DISTANCE_MATRIX_URL,
            language=settings.DISTANCE_MATRIX_LANGUAGE,
            timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
        ),
        OSRMTableProvider(
            base_url=settings.OSRM_BASE_URL,
            user_agent=settings.ROUTING_USER_AGENT,
            timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
        ),
        PerDestinationMatrixProvider(
            OSRMRouteClient(
                base_url=settings.OSRM_BASE_URL,
                user_agent=settings.ROUTING_USER_AGENT,
                timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
            )
        ),
    ]
    return RouteAggregator(
        providers,
        settings=AggregatorSettings(
            prefilter_max_distance_km=settings.PREFILTER_MAX_DISTANCE_KM,
            max_candidates=settings.MAX_ROUTED_CANDIDATES,
            batch_size=settings.MATRIX_BATCH_SIZE,
            batch_delay_seconds=settings.BATCH_DELAY_SECONDS,
        ),
        observer=metrics,
    )


_prom_metrics = PrometheusApiMetricsCollector()
_rate_limiter = FixedWindowRateLimiter(
    _build_rate_limit_store(_settings),
    max_attempts=_settings.RATE_LIMIT_MAX_ATTEMPTS,
    window_seconds=_settings.RATE_LIMIT_WINDOW_SECONDS,
)
_tenant_authorizer = TenantAuthorizer(_build_tenant_store(_settings))
_route_aggregator = _build_aggregator(_settings, _prom_metrics)


def get_prometheus_metrics() -> PrometheusApiMetricsCollector:
    return _prom_metrics


def get_rate_limiter() -> FixedWindowRateLimiter:
    return _rate_limiter


def get_tenant_authorizer() -> TenantAuthorizer:
    return _tenant_authorizer


def get_route_aggregator() -> RouteAggregator:
    return _route_aggregator


def get_route_settings() -> RouteApiSettings:
    return _settings
