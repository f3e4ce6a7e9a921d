from __future__ import annotations

from route_api.observability import (
    ApiRequestMetric,
    CompositeApiMetricsCollector,
    InMemoryApiMetricsCollector,
    PrometheusApiMetricsCollector,
    get_trace_id,
    set_trace_id,
)


def test_prometheus_collector_renders_request_and_provider_metrics() -> None:
    collector = PrometheusApiMetricsCollector()

    collector.observe(
        ApiRequestMetric(
            method="POST",
            path="/v1/routes/calculate",
            status_code=200,
            duration_ms=42.0,
            trace_id="trace-1",
        )
    )
    collector.observe_provider("google", "unavailable")
    collector.observe_provider("osrm", "available")
    rendered = collector.render()

    assert 'route_api_http_requests_total{method="POST",path="/v1/routes/calculate",status_code="200"} 1.0' in rendered
    assert "route_api_http_request_duration_ms_bucket" in rendered
    assert 'route_provider_attempts_total{outcome="unavailable",provider="google"} 1.0' in rendered
    assert 'route_provider_attempts_total{outcome="available",provider="osrm"} 1.0' in rendered


def test_composite_collector_fans_out() -> None:
    first = InMemoryApiMetricsCollector()
    second = InMemoryApiMetricsCollector()
    composite = CompositeApiMetricsCollector([first, second])

    composite.observe(ApiRequestMetric(method="GET", path="/healthz", status_code=200, duration_ms=1.0, trace_id="t"))

    assert first.snapshot() == second.snapshot()
    assert first.snapshot()[0]["path"] == "/healthz"


def test_trace_id_context_round_trip() -> None:
    set_trace_id("abc-123")

    assert get_trace_id() == "abc-123"


def test_in_memory_collector_keeps_only_recent_requests() -> None:
    collector = InMemoryApiMetricsCollector(max_items=3)

    for index in range(5):
        collector.observe(
            ApiRequestMetric(method="GET", path=f"/r{index}", status_code=200, duration_ms=1.0, trace_id="t")
        )

    assert [item["path"] for item in collector.snapshot()] == ["/r2", "/r3", "/r4"]
