from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

server_requests_total = Counter(
    "server_requests_total",
    "Total HTTP requests handled by server",
    labelnames=["path", "status"],
)

server_request_latency_seconds = Histogram(
    "server_request_latency_seconds",
    "HTTP request latency (seconds)",
    buckets=[0.05, 0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60, 120, 300],
    labelnames=["path"],
)

server_errors_total = Counter(
    "server_errors_total",
    "Total errors returned by server",
    labelnames=["type"],
)

provider_attempts_total = Counter(
    "provider_attempts_total",
    "Provider invocations made while walking the failover chain",
    labelnames=["provider", "outcome"],
)

provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Latency of a single provider invocation",
    buckets=[0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60],
    labelnames=["provider"],
)

dispatch_exhausted_total = Counter(
    "dispatch_exhausted_total",
    "Dispatches where every provider in the chain failed",
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
