"""
json-sage: JSON Schema generation backed by a DeepSeek-compatible LLM.

Combines local structural inference with remote, model-written schemas:
- SchemaInferrer derives a draft-07 schema from sample JSON, no network
- SchemaService asks the model for schemas, field descriptions and examples
- RetryPolicy retries transient API failures with exponential backoff

Architecture: httpx client + Jinja2 prompts + jsonschema validation + click CLI
"""

__version__ = "0.1.0"
