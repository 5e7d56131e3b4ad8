"""
Abstract base client for chat-completion APIs.

Defines the interface every LLM client implementation must adhere to.
This abstraction allows swapping providers without changing the service
layer or the retry policy.
"""

from abc import ABC, abstractmethod
from typing import Optional
import structlog

from json_sage.models.llm_models import ChatCompletionRequest, ChatCompletionResponse


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients.

    Responsibilities:
    - Send chat/completion requests to the remote endpoint
    - Parse responses into ChatCompletionResponse
    - Report non-2xx statuses as ApiError and transport failures as
      RetryableError

    Does NOT handle:
    - Prompt construction (that's PromptBuilder's job)
    - Parsing generated content as JSON (that's SchemaService's job)
    - Retries of any kind (that's RetryPolicy's job)
    """

    def __init__(self, base_url: str, timeout: int = 60, **kwargs):
        """
        Initialize base client.

        Args:
            base_url: API base URL (e.g., https://api.deepseek.com/v1)
            timeout: Request timeout in seconds
            **kwargs: Additional provider-specific config
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.extra_config = kwargs

        logger.debug(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    @abstractmethod
    async def chat(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        Send a chat-completion request.

        Raises:
            ApiError: The endpoint answered with a non-2xx status
            RetryableError: Timeout or network failure
            JsonSageError: 2xx response without usable content
        """
        pass

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> ChatCompletionResponse:
        """Send a plain text-completion request (legacy endpoint variant)."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check that the API is reachable and the credentials are accepted.

        Returns:
            True if healthy, False otherwise. Never raises.
        """
        pass

    async def close(self):
        """Close client connections. Default implementation does nothing."""
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
