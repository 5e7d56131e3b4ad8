"""Service layer tying prompts, the LLM client, retries and history together."""

from json_sage.services.schema_service import SchemaService, format_validation_errors

__all__ = ["SchemaService", "format_validation_errors"]
