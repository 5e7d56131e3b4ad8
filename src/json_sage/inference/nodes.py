"""
Immutable schema nodes produced by the local inferrer.

Each node mirrors one JSON Schema construct and renders itself with
``to_dict()``. Nodes are hashable and compare structurally: object property
order and union member order do not affect equality, so merge results can
be compared regardless of the order samples were seen in.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Union

DRAFT_07_URI = "http://json-schema.org/draft-07/schema#"

PRIMITIVE_TYPES = frozenset({"string", "number", "integer", "boolean", "null"})


@dataclass(frozen=True)
class AnyNode:
    """Open-ended node, rendered as ``{}``."""

    type: ClassVar[str | None] = None

    def to_dict(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class PrimitiveNode:
    """Scalar node with an optional string format."""

    type: str
    format: str | None = None

    def __post_init__(self) -> None:
        if self.type not in PRIMITIVE_TYPES:
            raise ValueError(f"Unknown primitive type: {self.type!r}")

    def to_dict(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.format:
            schema["format"] = self.format
        return schema


@dataclass(frozen=True)
class ArrayNode:
    """Array node with a single merged ``items`` node."""

    items: "SchemaNode"
    type: ClassVar[str] = "array"

    def to_dict(self) -> dict[str, Any]:
        return {"type": "array", "items": self.items.to_dict()}


@dataclass(frozen=True, eq=False)
class ObjectNode:
    """
    Object node.

    Attributes:
        properties: Ordered ``(name, node)`` pairs, names unique
        required: Names of properties required in every sample
    """

    properties: tuple[tuple[str, "SchemaNode"], ...] = ()
    required: frozenset[str] = frozenset()
    type: ClassVar[str] = "object"

    def __post_init__(self) -> None:
        names = [name for name, _ in self.properties]
        if len(names) != len(set(names)):
            raise ValueError("Property names must be unique")
        unknown = self.required - set(names)
        if unknown:
            raise ValueError(f"Required names not in properties: {sorted(unknown)}")

    @classmethod
    def from_mapping(
        cls, properties: Mapping[str, "SchemaNode"], required: set[str] | frozenset[str] = frozenset()
    ) -> "ObjectNode":
        return cls(tuple(properties.items()), frozenset(required))

    @property
    def property_map(self) -> dict[str, "SchemaNode"]:
        return dict(self.properties)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectNode):
            return NotImplemented
        return self.required == other.required and self.property_map == other.property_map

    def __hash__(self) -> int:
        return hash(("object", frozenset(self.properties), self.required))

    def to_dict(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: node.to_dict() for name, node in self.properties},
        }
        required = [name for name, _ in self.properties if name in self.required]
        if required:
            schema["required"] = required
        return schema


@dataclass(frozen=True, eq=False)
class UnionNode:
    """Nodes whose types could not be reconciled, rendered as ``anyOf``."""

    any_of: tuple["SchemaNode", ...]
    type: ClassVar[str | None] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnionNode):
            return NotImplemented
        return frozenset(self.any_of) == frozenset(other.any_of)

    def __hash__(self) -> int:
        return hash(("anyOf", frozenset(self.any_of)))

    def to_dict(self) -> dict[str, Any]:
        return {"anyOf": [node.to_dict() for node in self.any_of]}


SchemaNode = Union[AnyNode, PrimitiveNode, ArrayNode, ObjectNode, UnionNode]


def to_json_schema(node: SchemaNode, title: str | None = None) -> dict[str, Any]:
    """Render ``node`` as a standalone draft-07 document."""
    schema: dict[str, Any] = {"$schema": DRAFT_07_URI}
    if title:
        schema["title"] = title
    schema.update(node.to_dict())
    return schema
