"""Prometheus metrics for provider calls and schedule mutations."""

from prometheus_client import Counter, Histogram

provider_latency_ms = Histogram(
    "provider_latency_ms",
    "External provider call latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total external provider errors",
    ["provider", "reason"],
)

provider_cache_hits_total = Counter(
    "provider_cache_hits_total",
    "Total provider cache hits",
    ["provider"],
)

day_mutations_total = Counter(
    "day_mutations_total",
    "Committed day mutations",
    ["operation"],
)


class PrometheusProviderMetrics:
    """Prometheus-based provider metrics implementation."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        provider_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_error(self, provider: str, reason: str) -> None:
        provider_errors_total.labels(provider=provider, reason=reason).inc()

    def inc_cache_hit(self, provider: str) -> None:
        provider_cache_hits_total.labels(provider=provider).inc()
