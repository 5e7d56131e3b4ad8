"""String format detection for inferred schemas."""

import re

# Checked in order, first match wins
_FORMAT_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("date-time", re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")),
    ("email", re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")),
    ("uri", re.compile(r"^https?://")),
]


def detect_string_format(value: str) -> str | None:
    """
    Detect the JSON Schema ``format`` of a string value.

    Examples:
        >>> detect_string_format("2025-01-20T10:00:00Z")
        'date-time'
        >>> detect_string_format("ada@example.com")
        'email'
        >>> detect_string_format("https://example.com")
        'uri'
        >>> detect_string_format("plain") is None
        True
    """
    for name, pattern in _FORMAT_PATTERNS:
        if pattern.match(value):
            return name
    return None
