"""
Retry with exponential backoff and API error classification.

Main Components:
    - RetryPolicy: Bounded exponential-backoff retry for async operations
    - RetryConfig: Immutable per-call retry settings
    - ApiError / RetryableError: Variants consulted by the retry predicate
    - handle_api_error: Maps an ApiError to a retryable or terminal error

Usage:
    >>> from json_sage.retry import RetryPolicy
    >>> result = await RetryPolicy().execute(lambda: client.chat(request))
"""

from json_sage.retry.classification import handle_api_error
from json_sage.retry.exceptions import ApiError, RetryableError
from json_sage.retry.policy import (
    RetryConfig,
    RetryPolicy,
    backoff_delays,
    default_should_retry,
    with_retry,
)

__all__ = [
    "ApiError",
    "RetryableError",
    "RetryConfig",
    "RetryPolicy",
    "backoff_delays",
    "default_should_retry",
    "handle_api_error",
    "with_retry",
]
