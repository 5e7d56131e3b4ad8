"""
Configuration settings for json-sage.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from json_sage.exceptions import ErrorKind, JsonSageError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    LOG_LEVEL: str = "WARNING"  # CLI output stays clean; retries still show
    ENVIRONMENT: str = "development"

    # === DeepSeek API ===
    DEEPSEEK_API_KEY: Optional[str] = None
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com/v1"
    DEEPSEEK_MODEL: str = "deepseek-chat"
    DEEPSEEK_TIMEOUT: int = 60  # seconds

    # === LLM Generation Parameters ===
    LLM_MAX_TOKENS: int = 2048
    LLM_TEMPERATURE: float = 0.7

    # === Retry ===
    MAX_RETRIES: int = 3  # Total attempts, first call included
    RETRY_INITIAL_DELAY_MS: int = 1000
    RETRY_MAX_DELAY_MS: int = 10000

    # === Local inference ===
    INFER_SAMPLE_SIZE: int = 100  # Array elements inspected per array
    INFER_MAX_DEPTH: int = 10

    # === Prompts ===
    PROMPT_SAMPLE_LIMIT: int = 12000  # chars of sample JSON per prompt

    # === History ===
    HISTORY_MAX_SIZE: int = 1000

    def require_api_key(self) -> str:
        """Return the API key, or fail for operations that need the network."""
        if not self.DEEPSEEK_API_KEY:
            raise JsonSageError(
                "DEEPSEEK_API_KEY is not set",
                kind=ErrorKind.CONFIGURATION,
                details={"hint": "export DEEPSEEK_API_KEY or add it to .env"},
            )
        return self.DEEPSEEK_API_KEY
