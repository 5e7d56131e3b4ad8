"""Unit test fixtures (mocks and stubs).

Provides a mock LLM client and response factory for testing without
network access.
"""

import json
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from json_sage.llm.base_client import BaseLLMClient
from json_sage.models.llm_models import ChatCompletionResponse


def make_response(content: Any, model: str = "deepseek-chat") -> ChatCompletionResponse:
    """Build a ChatCompletionResponse; non-string content is JSON-encoded."""
    if not isinstance(content, str):
        content = json.dumps(content)
    return ChatCompletionResponse(
        content=content,
        model=model,
        finish_reason="stop",
        prompt_tokens=50,
        completion_tokens=150,
        total_tokens=200,
        latency_ms=120,
    )


@pytest.fixture
def chat_response() -> Callable[..., ChatCompletionResponse]:
    return make_response


@pytest.fixture
def mock_llm_client():
    """Mock BaseLLMClient; set ``chat.return_value`` or ``chat.side_effect`` per test."""
    mock = AsyncMock(spec=BaseLLMClient)
    mock.chat = AsyncMock(return_value=make_response({"type": "object"}))
    mock.close = AsyncMock(return_value=None)
    return mock
