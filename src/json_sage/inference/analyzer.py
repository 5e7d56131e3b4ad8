"""
Structural metrics and quality warnings for a JSON document.

Complements the inferrer: where the inferrer describes the shape, the
analyzer reports how deep and how uniform the document is, and flags
things a schema author usually wants to know about (odd field names,
mixed-type arrays, very wide or very deep objects).
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

FIELD_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
MAX_TOP_LEVEL_FIELDS = 100
MAX_FIELD_COMPLEXITY = 5


@dataclass(frozen=True)
class Insight:
    """A single finding about the analyzed document."""

    type: str
    message: str
    severity: str  # "error" | "warning"


@dataclass
class JsonInsights:
    """
    Analysis result.

    Attributes:
        depth: Maximum object nesting depth
        array_depth: Maximum array nesting depth
        null_count: Number of null values anywhere in the document
        field_count: Number of top-level fields (0 for non-objects)
        type_distribution: JSON type name -> occurrence count
        mixed_type_paths: Paths of arrays whose elements differ in type
        insights: Findings, errors first
    """

    depth: int = 0
    array_depth: int = 0
    null_count: int = 0
    field_count: int = 0
    type_distribution: dict[str, int] = field(default_factory=dict)
    mixed_type_paths: list[str] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.insights)


def json_type(value: Any) -> str:
    """JSON type name of a parsed value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def _element_kind(value: Any) -> str:
    # integer and number count as one kind when checking array uniformity
    kind = json_type(value)
    return "number" if kind == "integer" else kind


class JsonAnalyzer:
    """Compute JsonInsights for parsed JSON data."""

    def analyze(self, data: Any) -> JsonInsights:
        result = JsonInsights()
        types: Counter[str] = Counter()
        self._collect_metrics(data, 0, 0, types, result)
        result.type_distribution = dict(types)
        result.field_count = len(data) if isinstance(data, dict) else 0
        result.mixed_type_paths = self._find_mixed_type_arrays(data, "")
        result.insights = self._structure_insights(data)
        return result

    def _collect_metrics(
        self, value: Any, depth: int, array_depth: int, types: Counter, result: JsonInsights
    ) -> None:
        types[json_type(value)] += 1
        if value is None:
            result.null_count += 1
        elif isinstance(value, (list, tuple)):
            result.array_depth = max(result.array_depth, array_depth + 1)
            for item in value:
                self._collect_metrics(item, depth + 1, array_depth + 1, types, result)
        elif isinstance(value, dict):
            result.depth = max(result.depth, depth + 1)
            for item in value.values():
                self._collect_metrics(item, depth + 1, array_depth, types, result)

    def _find_mixed_type_arrays(self, value: Any, path: str) -> list[str]:
        found: list[str] = []
        if isinstance(value, (list, tuple)):
            kinds = sorted({_element_kind(item) for item in value})
            if len(kinds) > 1:
                found.append(f"{path or '$'}: {'|'.join(kinds)}")
            for index, item in enumerate(value):
                if isinstance(item, (dict, list, tuple)):
                    found.extend(self._find_mixed_type_arrays(item, f"{path}[{index}]"))
        elif isinstance(value, dict):
            for key, item in value.items():
                if isinstance(item, (dict, list, tuple)):
                    child = f"{path}.{key}" if path else str(key)
                    found.extend(self._find_mixed_type_arrays(item, child))
        return found

    def _structure_insights(self, data: Any) -> list[Insight]:
        if not isinstance(data, dict):
            return [Insight("data_quality", "Input data must be a JSON object", "error")]

        insights: list[Insight] = []
        if not data:
            insights.append(Insight("data_quality", "Input data must not be an empty object", "error"))
        elif len(data) > MAX_TOP_LEVEL_FIELDS:
            insights.append(
                Insight("performance", "Too many top-level fields may hurt performance", "warning")
            )

        for key, value in data.items():
            if not FIELD_NAME_PATTERN.match(str(key)):
                insights.append(
                    Insight("naming", f'Field name "{key}" does not follow naming conventions', "warning")
                )
            if isinstance(value, (list, tuple)) and len({_element_kind(v) for v in value}) > 1:
                insights.append(
                    Insight("data_quality", f'Array elements of field "{key}" have mixed types', "warning")
                )
            if isinstance(value, (dict, list, tuple)) and _complexity(value) > MAX_FIELD_COMPLEXITY:
                insights.append(
                    Insight("complexity", f'Field "{key}" is nested too deeply', "warning")
                )

        return sorted(insights, key=lambda i: i.severity != "error")


def _complexity(value: Any) -> int:
    """One per container, counting nested containers recursively."""
    children = value.values() if isinstance(value, dict) else value
    return 1 + sum(
        _complexity(child) for child in children if isinstance(child, (dict, list, tuple))
    )
