"""Metrics instrumentation for json-sage."""

from json_sage.monitoring.metrics import (
    api_latency_seconds,
    api_requests_total,
    api_tokens_total,
    inferences_total,
    retries_total,
)

__all__ = [
    "api_requests_total",
    "api_latency_seconds",
    "api_tokens_total",
    "retries_total",
    "inferences_total",
]
