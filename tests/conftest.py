"""Shared test fixtures and configuration for all tests.

This conftest.py provides settings, fixture paths and a no-wait retry
policy used across the unit tests.
"""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from json_sage.config import Settings
from json_sage.retry.policy import RetryConfig, RetryPolicy


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults.

    Explicit values win over environment variables and any local .env file.
    """
    return Settings(
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        DEEPSEEK_API_KEY="test-key",
        DEEPSEEK_BASE_URL="https://api.test.local/v1",
        DEEPSEEK_MODEL="deepseek-chat",
        DEEPSEEK_TIMEOUT=5,
        MAX_RETRIES=3,
        RETRY_INITIAL_DELAY_MS=1000,
        RETRY_MAX_DELAY_MS=10000,
        INFER_SAMPLE_SIZE=100,
        INFER_MAX_DEPTH=10,
        PROMPT_SAMPLE_LIMIT=12000,
        HISTORY_MAX_SIZE=1000,
    )


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_order() -> Dict[str, Any]:
    """Parsed tests/fixtures/sample_order.json."""
    return json.loads((FIXTURES_DIR / "sample_order.json").read_text(encoding="utf-8"))


@pytest.fixture
def recorded_sleeps() -> list[float]:
    """Seconds passed to the sleep of ``no_wait_policy``."""
    return []


@pytest.fixture
def no_wait_policy(recorded_sleeps) -> RetryPolicy:
    """RetryPolicy with default delays that records waits instead of sleeping."""
    async def fake_sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return RetryPolicy(RetryConfig(), sleep=fake_sleep)
