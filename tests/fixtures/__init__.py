"""
Test fixtures for json-sage.

Contains sample data for testing:
- sample_order.json: Nested order document (formats, nulls, object arrays)
- valid_schema.json: Draft-07 schema accepted by the metaschema
- invalid_schema.json: Schema with two metaschema violations
"""
