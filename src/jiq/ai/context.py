"""Query context captured for prompt construction."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List

__all__ = [
    "JsonTypeInfo",
    "QueryContext",
    "MAX_INPUT_SAMPLE_CHARS",
    "MAX_OUTPUT_SAMPLE_CHARS",
    "truncate_text",
]

LOGGER = logging.getLogger(__name__)

MAX_INPUT_SAMPLE_CHARS = 1_000
MAX_OUTPUT_SAMPLE_CHARS = 500
MAX_TOP_LEVEL_KEYS = 20
TRUNCATION_MARKER = "... [truncated]"

_PLURALS = {
    "Object": "objects",
    "Array": "arrays",
    "String": "strings",
    "Number": "numbers",
    "Boolean": "booleans",
    "Null": "nulls",
}


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut."""

    if len(text) <= limit:
        return text
    return f"{text[:limit]}\n{TRUNCATION_MARKER}"


def _type_name(value: Any) -> str:
    if value is None:
        return "Null"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, (int, float)):
        return "Number"
    if isinstance(value, str):
        return "String"
    if isinstance(value, list):
        return "Array"
    return "Object"


@dataclass(slots=True)
class JsonTypeInfo:
    """Shape summary of the input document."""

    root_type: str = ""
    element_type: str | None = None
    element_count: int | None = None
    top_level_keys: List[str] = field(default_factory=list)
    schema_hint: str = ""

    @classmethod
    def from_sample(cls, sample: str) -> "JsonTypeInfo":
        """Describe ``sample``; unparseable input yields an empty description."""

        try:
            value = json.loads(sample)
        except ValueError:
            LOGGER.debug("Input sample is not a single JSON document; skipping type info")
            return cls()
        return cls.from_value(value)

    @classmethod
    def from_value(cls, value: Any) -> "JsonTypeInfo":
        root_type = _type_name(value)
        if isinstance(value, dict):
            keys = [str(key) for key in list(value)[:MAX_TOP_LEVEL_KEYS]]
            hint = f"Object with keys: {', '.join(keys)}" if keys else "Empty object"
            return cls(root_type=root_type, top_level_keys=keys, schema_hint=hint)
        if isinstance(value, list):
            count = len(value)
            element_names = {_type_name(item) for item in value}
            if not element_names:
                element_type = None
                hint = "Empty array"
            elif len(element_names) == 1:
                element_type = _PLURALS[element_names.pop()]
                hint = f"Array of {count} {element_type}"
            else:
                element_type = "mixed"
                hint = f"Array of {count} mixed values"
            return cls(
                root_type=root_type,
                element_type=element_type,
                element_count=count,
                schema_hint=hint,
            )
        return cls(root_type=root_type, schema_hint=root_type)

    def describe(self) -> str:
        """Render the summary as prompt lines."""

        if not self.root_type:
            return ""
        lines = [f"Type: {self.root_type}"]
        if self.element_type:
            lines.append(f"Element type: {self.element_type}")
        if self.element_count is not None:
            lines.append(f"Element count: {self.element_count}")
        if self.top_level_keys:
            lines.append(f"Top-level keys: {', '.join(self.top_level_keys)}")
        if self.schema_hint and self.schema_hint != self.root_type:
            lines.append(f"Schema: {self.schema_hint}")
        return "\n".join(lines)


@dataclass(slots=True)
class QueryContext:
    """Everything the assistant is told about the query that just ran."""

    query: str
    cursor_pos: int
    input_sample: str
    output: str | None = None
    output_sample: str | None = None
    error: str | None = None
    json_type_info: JsonTypeInfo = field(default_factory=JsonTypeInfo)
    is_success: bool = True

    @classmethod
    def for_error(cls, query: str, cursor_pos: int, input_json: str, error: str) -> "QueryContext":
        return cls(
            query=query,
            cursor_pos=cursor_pos,
            input_sample=truncate_text(input_json, MAX_INPUT_SAMPLE_CHARS),
            error=error,
            json_type_info=JsonTypeInfo.from_sample(input_json),
            is_success=False,
        )

    @classmethod
    def for_success(cls, query: str, cursor_pos: int, input_json: str, output: str) -> "QueryContext":
        return cls(
            query=query,
            cursor_pos=cursor_pos,
            input_sample=truncate_text(input_json, MAX_INPUT_SAMPLE_CHARS),
            output=output,
            output_sample=truncate_text(output, MAX_OUTPUT_SAMPLE_CHARS),
            json_type_info=JsonTypeInfo.from_sample(input_json),
            is_success=True,
        )
