"""Unit tests for SchemaInferrer."""

import json

import pytest

from json_sage.exceptions import ErrorKind, JsonSageError
from json_sage.inference import (
    AnyNode,
    ArrayNode,
    ObjectNode,
    PrimitiveNode,
    SchemaInferrer,
    UnionNode,
    detect_string_format,
    infer_schema,
    merge_schemas,
    to_json_schema,
)


class TestPrimitives:

    def setup_method(self):
        self.inferrer = SchemaInferrer()

    @pytest.mark.parametrize("value,expected", [
        (None, PrimitiveNode("null")),
        (True, PrimitiveNode("boolean")),
        (False, PrimitiveNode("boolean")),
        (7, PrimitiveNode("integer")),
        (3.0, PrimitiveNode("integer")),
        (3.25, PrimitiveNode("number")),
        ("plain", PrimitiveNode("string")),
    ])
    def test_scalar_types(self, value, expected):
        assert self.inferrer.infer_schema(value) == expected

    def test_string_formats(self):
        assert self.inferrer.infer_schema("2025-01-20T10:00:00Z") == PrimitiveNode("string", "date-time")
        assert self.inferrer.infer_schema("ada@example.com") == PrimitiveNode("string", "email")
        assert self.inferrer.infer_schema("http://example.com/x") == PrimitiveNode("string", "uri")

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            self.inferrer.infer_schema({1, 2})


class TestObjects:

    def test_simple_object(self):
        schema = infer_schema({"a": 1, "b": "x"}).to_dict()

        assert schema == {
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "string"}},
            "required": ["a", "b"],
        }

    def test_date_time_property(self):
        schema = infer_schema({"d": "2025-01-20T10:00:00Z"}).to_dict()

        assert schema["properties"]["d"] == {"type": "string", "format": "date-time"}

    def test_null_property_is_not_required(self):
        node = infer_schema({"a": 1, "b": None})

        assert node.required == frozenset({"a"})
        assert node.property_map["b"] == PrimitiveNode("null")

    def test_empty_object(self):
        assert infer_schema({}).to_dict() == {"type": "object", "properties": {}}

    def test_property_order_is_preserved(self):
        schema = infer_schema({"z": 1, "a": 2, "m": 3}).to_dict()
        assert list(schema["properties"]) == ["z", "a", "m"]


class TestArrays:

    def test_empty_array_items_is_any(self):
        assert infer_schema([]) == ArrayNode(AnyNode())
        assert infer_schema([]).to_dict() == {"type": "array", "items": {}}

    def test_uniform_array(self):
        assert infer_schema([1, 2, 3]) == ArrayNode(PrimitiveNode("integer"))

    def test_mixed_array_becomes_union_of_distinct_nodes(self):
        node = infer_schema({"arr": [1, "x", True]})
        items = node.property_map["arr"].items

        assert isinstance(items, UnionNode)
        assert set(items.any_of) == {
            PrimitiveNode("integer"),
            PrimitiveNode("string"),
            PrimitiveNode("boolean"),
        }
        assert len(items.any_of) == 3
        assert "anyOf" in node.to_dict()["properties"]["arr"]["items"]

    def test_array_of_objects_merges_required(self):
        node = infer_schema([{"id": 1, "p": "x"}, {"id": 2}])

        assert node.items.required == frozenset({"id"})
        assert set(node.items.property_map) == {"id", "p"}

    def test_only_leading_sample_is_inspected(self):
        inferrer = SchemaInferrer(sample_size=2)
        node = inferrer.infer_schema([1, 2, "outlier"])

        assert node == ArrayNode(PrimitiveNode("integer"))

    def test_format_dropped_when_samples_disagree(self):
        node = infer_schema(["ada@example.com", "not an email"])
        assert node.items == PrimitiveNode("string")

    def test_format_kept_when_samples_agree(self):
        node = infer_schema(["ada@example.com", "bob@example.org"])
        assert node.items == PrimitiveNode("string", "email")


class TestDepthGuard:

    def test_nested_past_max_depth_becomes_any(self):
        inferrer = SchemaInferrer(max_depth=2)
        node = inferrer.infer_schema({"a": {"b": {"c": {"d": 1}}}})

        a = node.property_map["a"]
        b = a.property_map["b"]
        assert isinstance(b, ObjectNode)
        assert b.property_map["c"] == AnyNode()

    def test_very_deep_structure_does_not_recurse_forever(self):
        value = current = {}
        for _ in range(500):
            current["next"] = {}
            current = current["next"]

        node = SchemaInferrer(max_depth=10).infer_schema(value)

        depth = 0
        while isinstance(node, ObjectNode):
            node = node.property_map["next"]
            depth += 1
        assert node == AnyNode()
        assert depth == 11

    def test_zero_max_depth_keeps_root(self):
        node = SchemaInferrer(max_depth=0).infer_schema({"a": 1})
        assert node == ObjectNode.from_mapping({"a": AnyNode()}, {"a"})

    @pytest.mark.parametrize("kwargs", [{"sample_size": 0}, {"max_depth": -1}])
    def test_rejects_invalid_limits(self, kwargs):
        with pytest.raises(ValueError):
            SchemaInferrer(**kwargs)


class TestIdempotence:

    @pytest.mark.parametrize("value", [
        {"a": 1, "b": "x"},
        {"arr": [1, "x", True], "nested": {"k": None}},
        [{"id": 1}, {"id": 2, "tags": ["a"]}],
        "2025-01-20T10:00:00Z",
        [],
    ])
    def test_merge_with_itself_is_identity(self, value):
        node = infer_schema(value)
        assert merge_schemas([node, node]) == node

    def test_fixture_roundtrip(self, sample_order):
        node = infer_schema(sample_order)
        assert merge_schemas([node, node]) == node


class TestAnalyzeFile:

    def test_reads_and_infers(self, fixtures_dir):
        node = SchemaInferrer().analyze_file(fixtures_dir / "sample_order.json")
        schema = to_json_schema(node)

        assert schema["$schema"] == "http://json-schema.org/draft-07/schema#"
        assert schema["properties"]["customer"]["properties"]["email"] == {
            "type": "string", "format": "email",
        }
        assert schema["properties"]["total"] == {"type": "number"}
        assert "coupon" not in schema["required"]
        items = schema["properties"]["items"]["items"]
        assert items["required"] == ["sku", "quantity", "price"]
        # price 10.0 has no fractional part, 79.5 does
        assert items["properties"]["price"] == {
            "anyOf": [{"type": "integer"}, {"type": "number"}],
        }

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(JsonSageError) as exc_info:
            SchemaInferrer().analyze_file(path)

        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestDetectStringFormat:

    @pytest.mark.parametrize("value,expected", [
        ("2025-01-20T10:00:00Z", "date-time"),
        ("2025-01-20T10:00:00.123+02:00", "date-time"),
        ("2025-01-20", None),
        ("ada.l@example.co.uk", "email"),
        ("ada@", None),
        ("https://example.com", "uri"),
        ("ftp://example.com", None),
        ("", None),
    ])
    def test_detection(self, value, expected):
        assert detect_string_format(value) == expected

    def test_generated_schema_is_valid_json(self, sample_order):
        rendered = json.dumps(to_json_schema(infer_schema(sample_order), title="Order"))
        assert json.loads(rendered)["title"] == "Order"
