"""
Retry with exponential backoff around remote calls.

RetryPolicy is the only retry boundary in json-sage: the HTTP client never
retries on its own, and the CLI only formats whatever error escapes.

Backoff schedule (defaults):
    attempt 1 fails -> wait 1000 ms
    attempt 2 fails -> wait 2000 ms
    attempt 3 fails -> error propagates (max_retries = 3 total attempts)

Each wait doubles the previous one, capped at ``max_delay_ms``.

Usage:
    policy = RetryPolicy()
    result = await policy.execute(lambda: client.chat(request))
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterator, TypeVar

import structlog

from json_sage.monitoring.metrics import retries_total
from json_sage.retry.exceptions import ApiError, RetryableError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


def default_should_retry(error: BaseException) -> bool:
    """
    Classify an error by variant.

    ``ApiError`` is retryable only for gateway statuses (502/503/504),
    ``RetryableError`` always is, and anything else never is.
    """
    if isinstance(error, ApiError):
        return error.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, RetryableError)


@dataclass(frozen=True)
class RetryConfig:
    """
    Retry settings for a single ``execute`` call.

    Attributes:
        max_retries: Total number of attempts (not retries after the first)
        initial_delay_ms: Wait before the second attempt
        max_delay_ms: Ceiling for any single wait
        should_retry: Predicate deciding whether a caught error is retried
    """

    max_retries: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = 10000
    should_retry: Callable[[BaseException], bool] = field(default=default_should_retry)

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.initial_delay_ms < 0:
            raise ValueError("initial_delay_ms must be >= 0")
        if self.max_delay_ms < self.initial_delay_ms:
            raise ValueError("max_delay_ms must be >= initial_delay_ms")


def backoff_delays(config: RetryConfig) -> Iterator[int]:
    """
    Yield the waits (ms) RetryPolicy would use between attempts.

    There are ``max_retries - 1`` of them, since no wait follows the last
    attempt.
    """
    delay = config.initial_delay_ms
    for _ in range(config.max_retries - 1):
        yield delay
        delay = min(delay * 2, config.max_delay_ms)


class RetryPolicy:
    """
    Bounded exponential-backoff retry for async operations.

    The policy holds no per-call state, so one instance may serve any
    number of concurrent ``execute`` calls.

    Attributes:
        config: Default RetryConfig used when ``execute`` gets none
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize retry policy.

        Args:
            config: Default retry settings
            sleep: Coroutine used for backoff waits, takes seconds
        """
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        config: RetryConfig | None = None,
    ) -> T:
        """
        Run ``operation`` until it succeeds or retrying stops.

        Args:
            operation: Zero-argument callable returning an awaitable
            config: Overrides the policy's default config for this call

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The original error of the last attempt, unwrapped,
                once the predicate rejects it or attempts are exhausted
        """
        cfg = config or self.config
        delays = backoff_delays(cfg)
        attempt = 1

        while True:
            try:
                return await operation()
            except Exception as e:
                if not cfg.should_retry(e) or attempt >= cfg.max_retries:
                    if attempt > 1:
                        logger.warning(
                            "Giving up after retries",
                            attempts=attempt,
                            max_retries=cfg.max_retries,
                            error_type=type(e).__name__,
                            error=str(e),
                        )
                    raise

                delay_ms = next(delays)
                logger.warning(
                    f"Attempt {attempt} failed: {e}. Retrying in {delay_ms / 1000:g} seconds...",
                    attempt=attempt,
                    max_retries=cfg.max_retries,
                    error_type=type(e).__name__,
                    delay_ms=delay_ms,
                )
                retries_total.labels(error_type=type(e).__name__).inc()

                await self._sleep(delay_ms / 1000)
                attempt += 1


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    **config_overrides,
) -> T:
    """
    Run ``operation`` under a fresh RetryPolicy.

    Keyword arguments are RetryConfig fields (max_retries, initial_delay_ms,
    max_delay_ms, should_retry).
    """
    return await RetryPolicy().execute(operation, RetryConfig(**config_overrides))
