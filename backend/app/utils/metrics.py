"""Prometheus metrics for provider calls, ranking and carts."""

from prometheus_client import Counter, Histogram

# Provider call metrics
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Vendor provider call latency in milliseconds",
    ["category", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total vendor provider call errors",
    ["category", "reason"],
)

# Pipeline metrics
discoveries_degraded_total = Counter(
    "discoveries_degraded_total",
    "Discovery runs where a category was degraded to empty",
    ["category"],
)

packages_ranked = Histogram(
    "packages_ranked",
    "Number of packages returned per ranking call",
    buckets=[0, 1, 5, 10, 20, 50, 100, 250],
)

cart_mutations_total = Counter(
    "cart_mutations_total",
    "Cart mutations by action",
    ["action"],
)

checkouts_total = Counter(
    "checkouts_total",
    "Checkout attempts by outcome",
    ["outcome"],
)


class PrometheusProviderMetrics:
    """Prometheus-based provider metrics implementation."""

    def record_latency(self, category: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_latency_ms.labels(category=category, outcome=outcome).observe(latency_ms)

    def inc_error(self, category: str, reason: str) -> None:
        """Increment error counter."""
        provider_errors_total.labels(category=category, reason=reason).inc()
