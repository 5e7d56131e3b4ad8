"""Data models for the LLM wire contract and schema generation."""

from json_sage.models.llm_models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
)
from json_sage.models.schema_models import GenerationOptions, ValidationResult

__all__ = [
    "ChatMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "GenerationOptions",
    "ValidationResult",
]
