"""
Transport-level error variants consulted by the retry predicate.

``ApiError`` is raised by the HTTP client when the remote call completes
with a non-success status. ``RetryableError`` marks conditions known to be
transient (gateway errors, rate limiting, network timeouts).
"""


class ApiError(Exception):
    """
    Remote API returned a non-2xx status.

    Attributes:
        status_code: HTTP status code of the response
        message: Error message reported by the server (or the status text)
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


class RetryableError(Exception):
    """A transient failure that is safe to retry."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
