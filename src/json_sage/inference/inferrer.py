"""
Structural JSON Schema inference from sample data.

The inferrer walks a parsed JSON value and builds an immutable node tree:
scalars become primitive nodes (with format detection for strings),
objects record which properties are present and non-null, and arrays
merge the nodes of their leading elements into a single ``items`` node.

Array sampling: only the first ``sample_size`` elements are inspected.
Shapes that only occur further into a large array are not reflected in
``items``; raise ``sample_size`` when that matters.
"""

from pathlib import Path
from typing import Any

import structlog

from json_sage.inference.formats import detect_string_format
from json_sage.inference.merge import merge_schemas
from json_sage.inference.nodes import (
    AnyNode,
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    SchemaNode,
)
from json_sage.monitoring.metrics import inferences_total
from json_sage.storage import load_json

logger = structlog.get_logger(__name__)


class SchemaInferrer:
    """
    Infer a JSON Schema node tree from JSON data.

    Stateless between calls; one instance can be shared freely.

    Attributes:
        sample_size: Leading array elements inspected per array
        max_depth: Nesting depth past which an AnyNode is returned
    """

    def __init__(self, sample_size: int = 100, max_depth: int = 10):
        if sample_size < 1:
            raise ValueError("sample_size must be >= 1")
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.sample_size = sample_size
        self.max_depth = max_depth

    def infer_schema(self, value: Any, depth: int = 0) -> SchemaNode:
        """
        Infer the node describing ``value``.

        Args:
            value: Parsed JSON (dict, list, str, int, float, bool or None)
            depth: Current nesting depth

        Returns:
            Schema node for ``value``

        Raises:
            TypeError: If ``value`` is not a JSON-compatible Python value
        """
        if depth > self.max_depth:
            return AnyNode()

        if value is None:
            return PrimitiveNode("null")
        # bool before int: True is an int in Python
        if isinstance(value, bool):
            return PrimitiveNode("boolean")
        if isinstance(value, int):
            return PrimitiveNode("integer")
        if isinstance(value, float):
            return PrimitiveNode("integer" if value.is_integer() else "number")
        if isinstance(value, str):
            return PrimitiveNode("string", detect_string_format(value))
        if isinstance(value, (list, tuple)):
            return self._infer_array(value, depth)
        if isinstance(value, dict):
            return self._infer_object(value, depth)

        raise TypeError(f"Cannot infer a schema for {type(value).__name__} values")

    def _infer_array(self, value: list | tuple, depth: int) -> ArrayNode:
        if not value:
            return ArrayNode(AnyNode())
        samples = value[: self.sample_size]
        return ArrayNode(merge_schemas(self.infer_schema(item, depth + 1) for item in samples))

    def _infer_object(self, value: dict, depth: int) -> ObjectNode:
        properties = tuple(
            (str(key), self.infer_schema(item, depth + 1)) for key, item in value.items()
        )
        required = frozenset(str(key) for key, item in value.items() if item is not None)
        return ObjectNode(properties, required)

    def analyze_file(self, path: str | Path) -> SchemaNode:
        """
        Read a JSON file and infer its schema.

        Raises:
            JsonSageError: If the file is unreadable or not valid JSON
        """
        data = load_json(path)
        node = self.infer_schema(data)
        inferences_total.labels(source="file").inc()
        logger.info("Inferred schema from file", path=str(path), root_type=node.type)
        return node


def infer_schema(value: Any, sample_size: int = 100, max_depth: int = 10) -> SchemaNode:
    """Shortcut for ``SchemaInferrer(sample_size, max_depth).infer_schema(value)``."""
    return SchemaInferrer(sample_size=sample_size, max_depth=max_depth).infer_schema(value)
