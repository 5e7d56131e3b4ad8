"""
Merge schema nodes observed from different samples.

Rules:
    - no nodes -> AnyNode
    - a single node -> returned unchanged
    - union members are flattened; AnyNode is dropped while any concrete
      node remains (it carries no shape evidence)
    - nodes are grouped by type and each group is merged:
        object:    union of property names, each merged across the samples
                   defining it; required iff required in every sample
        array:     merge of all items
        primitive: format kept only when every sample agrees on it
    - one group -> its merged node; several -> UnionNode of the groups

The result is independent of sample order (under node equality) and
merging a node with itself returns an equal node.
"""

from typing import Iterable, Iterator

from json_sage.inference.nodes import (
    AnyNode,
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    SchemaNode,
    UnionNode,
)


def merge_schemas(nodes: Iterable[SchemaNode]) -> SchemaNode:
    """Merge ``nodes`` into one representative node."""
    nodes = list(nodes)
    if not nodes:
        return AnyNode()
    if len(nodes) == 1:
        return nodes[0]

    concrete = [node for node in _flatten(nodes) if not isinstance(node, AnyNode)]
    if not concrete:
        return AnyNode()

    groups: dict[str, list[SchemaNode]] = {}
    for node in concrete:
        groups.setdefault(node.type, []).append(node)

    merged = [_merge_group(type_name, group) for type_name, group in groups.items()]
    if len(merged) == 1:
        return merged[0]
    return UnionNode(tuple(merged))


def _flatten(nodes: list[SchemaNode]) -> Iterator[SchemaNode]:
    for node in nodes:
        if isinstance(node, UnionNode):
            yield from _flatten(list(node.any_of))
        else:
            yield node


def _merge_group(type_name: str, group: list[SchemaNode]) -> SchemaNode:
    if type_name == "object":
        return _merge_objects(group)  # type: ignore[arg-type]
    if type_name == "array":
        return ArrayNode(merge_schemas(node.items for node in group))  # type: ignore[union-attr]

    formats = {node.format for node in group}  # type: ignore[union-attr]
    shared_format = formats.pop() if len(formats) == 1 else None
    return PrimitiveNode(type_name, shared_format)


def _merge_objects(group: list[ObjectNode]) -> ObjectNode:
    maps = [node.property_map for node in group]

    names: list[str] = []
    for node in group:
        for name, _ in node.properties:
            if name not in names:
                names.append(name)

    properties = tuple(
        (name, merge_schemas(m[name] for m in maps if name in m))
        for name in names
    )
    required = frozenset(
        name for name in names if all(name in node.required for node in group)
    )
    return ObjectNode(properties, required)
