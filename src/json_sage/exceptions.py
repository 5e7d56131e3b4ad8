"""
Error type shared by every json-sage layer.

A single exception carries a ``kind`` tag and a structured ``details``
payload, so callers branch on ``error.kind`` instead of on a class
hierarchy. The retry layer's transport classification (``ApiError``,
``RetryableError``) lives in ``json_sage.retry.exceptions``.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Category of a json-sage failure."""

    VALIDATION = "validation"
    SCHEMA_GENERATION = "schema_generation"
    API = "api"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    IO = "io"


class JsonSageError(Exception):
    """
    Terminal json-sage error.

    Never retried by the default retry predicate.

    Attributes:
        message: Human-readable error description
        kind: Failure category
        details: Structured error data for logging
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.VALIDATION,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def __repr__(self) -> str:
        return f"JsonSageError(kind={self.kind.value!r}, message={self.message!r})"
