"""
LLM client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for chat-completion clients
- DeepSeekClient: httpx implementation for DeepSeek-compatible APIs
- PromptBuilder: Renders the Jinja2 prompt templates
- text_utils: Truncation and JSON extraction helpers
"""

from json_sage.llm.base_client import BaseLLMClient
from json_sage.llm.deepseek_client import DeepSeekClient
from json_sage.llm.prompt_builder import PromptBuilder
from json_sage.llm.text_utils import extract_json_block, truncate_at_line_boundary

__all__ = [
    "BaseLLMClient",
    "DeepSeekClient",
    "PromptBuilder",
    "extract_json_block",
    "truncate_at_line_boundary",
]
