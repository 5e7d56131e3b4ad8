"""
DeepSeek-compatible chat-completion client.

Communicates with the API using httpx AsyncClient. Supports:
- Chat completions (POST /chat/completions)
- Legacy text completions (POST /completions)
- Bearer-token authentication and connection pooling
- Health check via GET /models

The client never retries. Non-2xx responses become ApiError and transport
failures become RetryableError, for RetryPolicy to classify.
"""

import time
from typing import Any, Dict, Optional
import httpx
import structlog

from json_sage.exceptions import ErrorKind, JsonSageError
from json_sage.llm.base_client import BaseLLMClient
from json_sage.models.llm_models import ChatCompletionRequest, ChatCompletionResponse
from json_sage.monitoring.metrics import api_latency_seconds, api_tokens_total
from json_sage.retry.exceptions import ApiError, RetryableError


logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.deepseek.com/v1"


class DeepSeekClient(BaseLLMClient):
    """
    DeepSeek API client using httpx for async HTTP communication.

    API Endpoints:
    - POST /chat/completions: {model, messages, max_tokens, temperature}
    - POST /completions: {model, prompt, max_tokens, temperature}
    - GET /models: List available models (health check)

    Response content is read from ``choices[0].message.content`` and falls
    back to ``choices[0].text``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 60,
        default_model: str = "deepseek-chat",
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Initialize DeepSeek client.

        Args:
            api_key: Bearer token
            base_url: API base URL
            timeout: Request timeout in seconds
            default_model: Model used by ``complete`` when none is given
            connection_limits: httpx connection pool limits
            transport: Custom httpx transport (tests use httpx.MockTransport)
            **kwargs: Additional config
        """
        super().__init__(base_url, timeout, **kwargs)
        self._api_key = api_key
        self.default_model = default_model

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def chat(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        POST /chat/completions.

        Response:
        {
            "model": "deepseek-chat",
            "choices": [{"message": {"role": "assistant", "content": "..."},
                         "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 50, "completion_tokens": 150, "total_tokens": 200}
        }
        """
        logger.info(
            "Sending chat completion request",
            model=request.model,
            messages=len(request.messages),
            temperature=request.temperature,
            max_tokens=request.max_tokens,
        )
        return await self._post("/chat/completions", request.to_payload(), request.model)

    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> ChatCompletionResponse:
        """POST /completions; content comes from ``choices[0].text``."""
        payload = {
            "model": model or self.default_model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        logger.info("Sending text completion request", model=payload["model"], prompt_length=len(prompt))
        return await self._post("/completions", payload, payload["model"])

    async def _post(self, path: str, payload: Dict[str, Any], model: str) -> ChatCompletionResponse:
        start_time = time.time()
        client = await self._get_client()

        try:
            response = await client.post(path, json=payload)
        except httpx.TimeoutException as e:
            api_latency_seconds.labels(model=model, success="false").observe(time.time() - start_time)
            logger.warning("API request timeout", path=path, timeout=self.timeout, error=str(e))
            raise RetryableError(f"Request timeout after {self.timeout}s") from e
        except httpx.TransportError as e:
            api_latency_seconds.labels(model=model, success="false").observe(time.time() - start_time)
            logger.warning("API network error", path=path, error=str(e), error_type=type(e).__name__)
            raise RetryableError(f"Network error: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if response.is_error:
            message = self._error_message(response)
            api_latency_seconds.labels(model=model, success="false").observe(latency_ms / 1000.0)
            logger.error("API HTTP error", path=path, status_code=response.status_code, error=message)
            raise ApiError(response.status_code, message)

        try:
            data = response.json()
        except ValueError as e:
            raise JsonSageError(
                "Invalid JSON response from API",
                kind=ErrorKind.API,
                details={"parse_error": str(e)},
            ) from e

        if not isinstance(data, dict):
            raise JsonSageError("Empty response from API", kind=ErrorKind.API, details={"response": data})

        content = self._extract_content(data)
        usage = data.get("usage") or {}
        response_model = data.get("model", model)
        choice = data["choices"][0]

        api_latency_seconds.labels(model=response_model, success="true").observe(latency_ms / 1000.0)
        if usage.get("prompt_tokens"):
            api_tokens_total.labels(model=response_model, token_type="prompt").inc(usage["prompt_tokens"])
        if usage.get("completion_tokens"):
            api_tokens_total.labels(model=response_model, token_type="completion").inc(usage["completion_tokens"])

        logger.info(
            "API request successful",
            model=response_model,
            latency_ms=latency_ms,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
        )

        return ChatCompletionResponse(
            content=content,
            model=response_model,
            finish_reason=choice.get("finish_reason"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
            latency_ms=latency_ms,
        )

    @staticmethod
    def _extract_content(data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            raise JsonSageError("Empty response from API", kind=ErrorKind.API, details={"response": data})

        first = choices[0]
        if not isinstance(first, dict):
            raise JsonSageError("Empty response from API", kind=ErrorKind.API, details={"response": data})
        message = first.get("message")
        content = (message.get("content") if isinstance(message, dict) else None) or first.get("text")
        if not content:
            raise JsonSageError("Empty response from API", kind=ErrorKind.API, details={"response": data})
        return content

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the server's ``error.message``, then the raw body."""
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str):
                return error
            if body.get("message"):
                return str(body["message"])
        return response.text or response.reason_phrase

    async def health_check(self) -> bool:
        """GET /models. True if the API answers 2xx."""
        try:
            client = await self._get_client()
            response = await client.get("/models", timeout=5.0)
            response.raise_for_status()
            logger.debug("API health check passed")
            return True
        except httpx.HTTPError as e:
            logger.warning("API health check failed", error=str(e))
            return False

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed API client connection")
