"""Prometheus metrics for analysis verdicts and narrative service health"""

from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "clinic_analysis_total",
    "Total clinic analyses run",
    ["kind", "verdict"],  # kind: location | coo | ... ; verdict: fit | caution | not_recommended
)

# Narrative (LLM) metrics
narrative_latency_histogram = Histogram(
    "narrative_latency_seconds",
    "LLM completion response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 180.0],
)

narrative_failures_counter = Counter(
    "narrative_failures_total",
    "Failed or empty LLM completions",
    ["reason"],  # timeout | http_status | transport | invalid_response | empty | unexpected
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(kind: str, verdict: str) -> None:
    """Record verdict distribution per analysis tab"""
    analysis_counter.labels(kind=kind, verdict=verdict).inc()
