"""Prometheus metrics for json-sage.

The CLI is short-lived, so these are mostly useful when json-sage is embedded
in a long-running process that exposes the default registry.
"""

from prometheus_client import Counter, Histogram

# === API Metrics ===

api_requests_total = Counter(
    "jsonsage_api_requests_total",
    "Total chat-completion requests by operation and outcome",
    ["operation", "outcome"],
)
"""
Remote requests counter.

Labels:
- operation: generate_schema, generate_schema_from_data, generate_field_descriptions, generate_examples
- outcome: success, failure
"""

api_latency_seconds = Histogram(
    "jsonsage_api_latency_seconds",
    "Chat-completion latency in seconds (single HTTP call)",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

api_tokens_total = Counter(
    "jsonsage_api_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)

# === Retry Metrics ===

retries_total = Counter(
    "jsonsage_retries_total",
    "Retry waits scheduled by RetryPolicy, by error type",
    ["error_type"],
)
"""
Retry counter.

Incremented once per backoff wait, i.e. never on the first attempt and
never on the terminal failure.
"""

# === Local Inference Metrics ===

inferences_total = Counter(
    "jsonsage_inferences_total",
    "Local schema inferences by source",
    ["source"],
)
"""
Local inference counter.

Labels:
- source: file (SchemaInferrer.analyze_file), service (SchemaService)
"""
