"""
Text processing utilities for the LLM layer.

Truncates sample JSON before it is embedded in a prompt and recovers the
JSON payload from model output that wraps it in Markdown or prose.
"""

import re


_FENCE_PATTERN = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)


def truncate_at_line_boundary(text: str, max_chars: int) -> str:
    """
    Truncate text at the last line break before max_chars.

    Pretty-printed JSON keeps one token per line, so cutting on a line
    boundary never splits a key or a string value in half.

    Examples:
        >>> truncate_at_line_boundary("a\\nb\\nc", 4)
        'a\\nb'
        >>> truncate_at_line_boundary("no newline here", 5)
        'no ne'
    """
    if len(text) <= max_chars:
        return text

    truncated_segment = text[:max_chars]
    last_newline = truncated_segment.rfind("\n")
    if last_newline > 0:
        return text[:last_newline]

    # Single huge line - hard cut
    return truncated_segment


def extract_json_block(content: str) -> str:
    """
    Extract the JSON document from model output.

    Handles, in order:
    - a fenced Markdown block (```json ... ``` or bare ```)
    - prose around a JSON object or array (takes the outermost braces)
    - plain JSON (trailing prose after the last closer is dropped)

    The result is not parsed; callers decide what a parse failure means.
    """
    text = content.strip()

    fenced = _FENCE_PATTERN.search(text)
    if fenced:
        return fenced.group(1).strip()

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return text
    return text[start:end + 1]


def count_tokens_approximate(text: str) -> int:
    """Rough token estimate (~4 chars per token) for prompt-size logging."""
    return max(1, len(text) // 4)
