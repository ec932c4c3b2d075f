from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Dedicated registry; the api exposes it on /metrics
registry = CollectorRegistry()

cache_hits = Counter("cache_hits_total", "Cache hits", registry=registry)
cache_misses = Counter("cache_misses_total", "Cache misses (absent or wrong type)", registry=registry)
loader_calls = Counter("loader_calls_total", "Loader executions", registry=registry)
loader_failures = Counter("loader_failures_total", "Loader executions that raised", registry=registry)
loader_latency_seconds = Histogram(
    "loader_latency_seconds", "Loader latency seconds",
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 30), registry=registry,
)
validator_rejections = Counter("validator_rejections_total", "Loaded values refused by the validator", registry=registry)
lock_timeouts = Counter("lock_timeouts_total", "Per-key lock waits that timed out", registry=registry)
lock_self_heals = Counter("lock_self_heals_total", "Stale lock handles removed after a timeout", registry=registry)
registry_fallbacks = Counter("registry_fallbacks_total", "Unregistered lock handles issued", registry=registry)


def export_metrics() -> bytes:
    """Return the latest metrics payload (Prometheus text format)."""
    return generate_latest(registry)
