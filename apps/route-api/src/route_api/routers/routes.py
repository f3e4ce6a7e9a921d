from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from route_engine.aggregator import RouteAggregator
from route_engine.formatting import format_distance, format_duration
from route_engine.models import RouteResult

from route_api.dependencies import (
    get_rate_limiter,
    get_route_aggregator,
    get_route_settings,
    get_tenant_authorizer,
)
from route_api.errors import RateLimitExceeded, RequestValidationFailed
from route_api.rate_limit import FixedWindowRateLimiter
from route_api.response import routes_response
from route_api.schemas.routes import RouteItem
from route_api.settings import RouteApiSettings
from route_api.tenants import TenantAuthorizer
from route_api.validation import parse_route_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/routes", tags=["routes"])

RATE_LIMIT_ENDPOINT = "calculate-routes"


def _to_item(result: RouteResult) -> dict:
    candidate = result.candidate
    item = RouteItem(
        name=candidate.name,
        distance_km=result.distance_km,
        duration_minutes=result.duration_minutes,
        latitude=candidate.point.lat,
        longitude=candidate.point.lng,
        formatted_distance=format_distance(result.distance_km),
        formatted_duration=format_duration(result.duration_minutes),
        address=candidate.address,
        number=candidate.number,
        neighborhood=candidate.neighborhood,
        city=candidate.city,
        state=candidate.state,
        services=candidate.services,
    )
    return item.model_dump(by_alias=True, exclude_none=True)


@router.post("/calculate")
async def calculate_routes(
    request: Request,
    authorizer: TenantAuthorizer = Depends(get_tenant_authorizer),
    rate_limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    aggregator: RouteAggregator = Depends(get_route_aggregator),
    settings: RouteApiSettings = Depends(get_route_settings),
) -> dict:
    try:
        body = await request.json()
    except ValueError as exc:
        raise RequestValidationFailed("Invalid JSON body") from exc

    route_request = parse_route_request(body)
    await authorizer.authorize(route_request.tenant_id)

    decision = await rate_limiter.check_limit(route_request.tenant_id, RATE_LIMIT_ENDPOINT, now_seconds=time.time())
    if not decision.allowed:
        logger.warning(
            "route_rate_limited",
            extra={"tenant_id": route_request.tenant_id, "retry_after": decision.retry_after_seconds},
        )
        raise RateLimitExceeded(decision.retry_after_seconds or 1)

    results = await aggregator.aggregate(route_request.origin, route_request.locations)
    visible = [result for result in results if result.distance_km <= settings.DISPLAY_MAX_DISTANCE_KM]
    logger.info(
        "routes_calculated",
        extra={
            "tenant_id": route_request.tenant_id,
            "requested": len(route_request.locations),
            "routed": len(results),
            "returned": len(visible),
        },
    )
    return routes_response([_to_item(result) for result in visible])
