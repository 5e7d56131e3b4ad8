"""
Unit tests for json-sage.

Test individual components in isolation:
- Retry policy (attempt counting, backoff, classification)
- Schema inference (inferrer, merge, analyzer)
- LLM layer (DeepSeek client over MockTransport, prompts, text utils)
- Schema service, history, storage and CLI
"""
