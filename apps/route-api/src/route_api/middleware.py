from __future__ import annotations

import logging
from time import perf_counter
from uuid import uuid4

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from route_api.observability import ApiMetricCollector, ApiRequestMetric, set_trace_id
from route_api.response import error_response

logger = logging.getLogger(__name__)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Traces and measures each request.

    Unexpected errors are turned into the JSON 500 here, inside the CORS
    middleware, so browsers can still read the error body.
    """

    def __init__(self, app, collector: ApiMetricCollector) -> None:
        super().__init__(app)
        self._collector = collector
        self._tracer = trace.get_tracer("route-api")

    async def dispatch(self, request: Request, call_next) -> Response:
        trace_id = request.headers.get("x-trace-id") or str(uuid4())
        set_trace_id(trace_id)
        started = perf_counter()
        with self._tracer.start_as_current_span("http.request") as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.route", request.url.path)
            span.set_attribute("trace.id", trace_id)
            try:
                response = await call_next(request)
            except Exception as exc:
                span.record_exception(exc)
                logger.exception("unhandled_error", extra={"path": request.url.path, "trace_id": trace_id})
                response = JSONResponse(status_code=500, content=error_response("Internal server error"))
            span.set_attribute("http.status_code", response.status_code)
            self._collector.observe(
                ApiRequestMetric(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=(perf_counter() - started) * 1000.0,
                    trace_id=trace_id,
                )
            )

        response.headers["x-trace-id"] = trace_id
        return response
