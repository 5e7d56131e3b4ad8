"""
Local JSON Schema inference.

Components:
- SchemaInferrer: Recursive type inference over parsed JSON
- merge_schemas: Order-independent merge of sample nodes
- Schema nodes: AnyNode, PrimitiveNode, ArrayNode, ObjectNode, UnionNode
- JsonAnalyzer: Structural metrics and quality warnings
"""

from json_sage.inference.analyzer import Insight, JsonAnalyzer, JsonInsights
from json_sage.inference.formats import detect_string_format
from json_sage.inference.inferrer import SchemaInferrer, infer_schema
from json_sage.inference.merge import merge_schemas
from json_sage.inference.nodes import (
    DRAFT_07_URI,
    AnyNode,
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    SchemaNode,
    UnionNode,
    to_json_schema,
)

__all__ = [
    "DRAFT_07_URI",
    "AnyNode",
    "ArrayNode",
    "Insight",
    "JsonAnalyzer",
    "JsonInsights",
    "ObjectNode",
    "PrimitiveNode",
    "SchemaInferrer",
    "SchemaNode",
    "UnionNode",
    "detect_string_format",
    "infer_schema",
    "merge_schemas",
    "to_json_schema",
]
