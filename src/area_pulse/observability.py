from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Protocol

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")
_configured = False


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


def get_trace_id() -> str:
    return _trace_id_ctx.get()


def configure_otel(service_name: str) -> None:
    """Install the process tracer provider once; later calls keep the first one."""
    global _configured
    if _configured:
        return
    resource = Resource.create({"service.name": service_name, "service.namespace": "area-pulse"})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)
    _configured = True


def classify_status(status_code: int) -> str:
    """Outcome label for an upstream call; status 0 means no response arrived."""
    if status_code == 0:
        return "network_error"
    if status_code == 401:
        return "unauthorized"
    if 200 <= status_code < 300:
        return "success"
    if 400 <= status_code < 500:
        return "client_error"
    if status_code >= 500:
        return "server_error"
    return "unexpected_status"


@dataclass(frozen=True)
class UpstreamCallMetric:
    endpoint: str
    method: str
    status_code: int
    duration_ms: float
    trace_id: str

    @property
    def outcome(self) -> str:
        return classify_status(self.status_code)


class UpstreamMetricCollector(Protocol):
    def observe(self, metric: UpstreamCallMetric) -> None: ...


class InMemoryUpstreamMetricsCollector(UpstreamMetricCollector):
    def __init__(self) -> None:
        self._metrics: list[UpstreamCallMetric] = []

    def observe(self, metric: UpstreamCallMetric) -> None:
        self._metrics.append(metric)

    def snapshot(self) -> list[dict]:
        return [{**asdict(item), "outcome": item.outcome} for item in self._metrics]


class PrometheusUpstreamMetricsCollector(UpstreamMetricCollector):
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "area_pulse_upstream_requests_total",
            "Total upstream API requests",
            labelnames=("endpoint", "method", "status_code", "outcome"),
            registry=self._registry,
        )
        self._latency_histogram = Histogram(
            "area_pulse_upstream_request_duration_ms",
            "Upstream API request latency in milliseconds",
            labelnames=("endpoint", "method"),
            buckets=(25, 50, 100, 250, 500, 1000, 3000, 10000, 30000),
            registry=self._registry,
        )

    def observe(self, metric: UpstreamCallMetric) -> None:
        status = str(metric.status_code)
        self._request_counter.labels(metric.endpoint, metric.method, status, metric.outcome).inc()
        self._latency_histogram.labels(metric.endpoint, metric.method).observe(metric.duration_ms)

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")


class CompositeUpstreamMetricsCollector(UpstreamMetricCollector):
    def __init__(self, collectors: list[UpstreamMetricCollector]) -> None:
        self._collectors = collectors

    def observe(self, metric: UpstreamCallMetric) -> None:
        for collector in self._collectors:
            collector.observe(metric)
