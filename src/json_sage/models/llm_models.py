"""
Chat-completion request/response models.

These are internal to the LLM layer and describe the wire contract of a
DeepSeek-compatible endpoint. They are kept separate from the schema
generation options so the client can be swapped without touching the
service layer.
"""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


class ChatMessage(BaseModel):
    """One message of a chat-completion conversation."""
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(..., description="Message author role")
    content: str = Field(..., description="Message text")


class ChatCompletionRequest(BaseModel):
    """
    Standardized request sent to any LLM client implementation.

    Serialized as the POST body of ``/chat/completions``.
    """
    model_config = ConfigDict(frozen=True)

    messages: list[ChatMessage] = Field(..., min_length=1, description="Conversation so far")
    model: str = Field(default="deepseek-chat", description="Model identifier")
    max_tokens: int = Field(default=2048, ge=1, le=32768, description="Maximum tokens to generate")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class ChatCompletionResponse(BaseModel):
    """
    Parsed chat-completion response.

    Contains the generated text plus metadata for logging. Parsing the
    content as JSON happens in the service layer.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated text")
    model: str = Field(..., description="Model that produced the response")
    finish_reason: Optional[str] = Field(default=None, description="Why generation stopped")
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    total_tokens: Optional[int] = Field(default=None, description="Prompt + completion tokens")
    latency_ms: int = Field(..., ge=0, description="Request latency in milliseconds")
