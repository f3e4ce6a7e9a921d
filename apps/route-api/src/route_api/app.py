from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from locator_devkit.observability import configure_logging, configure_otel, configure_probe_access_log_filter
from starlette.exceptions import HTTPException as StarletteHTTPException

from route_api.dependencies import get_prometheus_metrics
from route_api.errors import ApiError
from route_api.middleware import ObservabilityMiddleware
from route_api.observability import (
    CompositeApiMetricsCollector,
    InMemoryApiMetricsCollector,
    get_trace_id,
)
from route_api.response import error_response, success_response
from route_api.routers.routes import router as routes_router
from route_api.settings import RouteApiSettings, get_settings

logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = ["authorization", "content-type", "x-client-info", "apikey"]


def create_app(settings: RouteApiSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_probe_access_log_filter()

    app = FastAPI(title="Route Locator API", version="0.1.0")
    app.state.api_metrics = InMemoryApiMetricsCollector()
    app.state.prom_metrics = get_prometheus_metrics()
    app.state.composite_metrics = CompositeApiMetricsCollector(
        [app.state.api_metrics, app.state.prom_metrics]
    )
    app.add_middleware(ObservabilityMiddleware, collector=app.state.composite_metrics)
    # outermost; route errors are already JSON by the time they get here
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_origin_regex=settings.CORS_ALLOWED_ORIGIN_REGEX,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=CORS_ALLOWED_HEADERS,
    )
    app.include_router(routes_router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz() -> dict:
        return success_response({"status": "ready"}, meta={})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message),
            headers=exc.headers or None,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(status_code=400, content=error_response(message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_middleware_error",
            exc_info=exc,
            extra={"path": request.url.path, "trace_id": get_trace_id()},
        )
        return JSONResponse(status_code=500, content=error_response("Internal server error"))

    return app


app = create_app()
