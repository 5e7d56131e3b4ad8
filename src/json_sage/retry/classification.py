"""
Map API failures onto retryable and terminal errors.

Wrap the body of a retried operation so RetryPolicy sees the classified
error instead of the raw status:

    async def op():
        try:
            return await client.chat(request)
        except ApiError as e:
            handle_api_error(e)
"""

from typing import NoReturn

from json_sage.exceptions import ErrorKind, JsonSageError
from json_sage.retry.exceptions import ApiError, RetryableError

_RETRYABLE_MESSAGES = {
    502: "API service temporarily unavailable (502 Bad Gateway)",
    503: "API service temporarily overloaded (503 Service Unavailable)",
    504: "API service timed out (504 Gateway Timeout)",
    429: "API rate limit exceeded, please retry later",
}


def handle_api_error(error: BaseException) -> NoReturn:
    """
    Re-raise ``error`` as a classified failure. Never returns.

    Raises:
        RetryableError: For 502, 503, 504 and 429
        JsonSageError: AUTHENTICATION for 401, API for any other status
        BaseException: ``error`` itself when it is not an ApiError
    """
    if not isinstance(error, ApiError):
        raise error

    status = error.status_code
    if status in _RETRYABLE_MESSAGES:
        raise RetryableError(_RETRYABLE_MESSAGES[status]) from error
    if status == 401:
        raise JsonSageError(
            "API key is invalid or missing",
            kind=ErrorKind.AUTHENTICATION,
            details={"status": status},
        ) from error
    raise JsonSageError(
        f"API error: {error.message}",
        kind=ErrorKind.API,
        details={"status": status},
    ) from error
