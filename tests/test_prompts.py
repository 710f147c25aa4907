"""Tests for prompt construction and input shape summaries."""

from __future__ import annotations

from jiq.ai.context import JsonTypeInfo, QueryContext
from jiq.ai.prompt import build_error_prompt, build_prompt, build_success_prompt


def _error_ctx(**overrides) -> QueryContext:
    values = dict(query=".name", cursor_pos=5, input_sample='{"name": "test"}', error="syntax error", is_success=False)
    values.update(overrides)
    return QueryContext(**values)


def _success_ctx(**overrides) -> QueryContext:
    values = dict(query=".items[]", cursor_pos=8, input_sample="[1, 2, 3]", output="1\n2\n3", output_sample="1\n2\n3")
    values.update(overrides)
    return QueryContext(**values)


def test_error_prompt_includes_query_error_and_cursor() -> None:
    prompt = build_error_prompt(_error_ctx(), 200)

    assert ".name" in prompt
    assert "syntax error" in prompt
    assert "Cursor position: 5" in prompt
    assert "troubleshoot" in prompt
    assert '{"name": "test"}' in prompt


def test_error_prompt_includes_type_info() -> None:
    info = JsonTypeInfo(
        root_type="Object",
        top_level_keys=["name", "age"],
        schema_hint="Object with keys: name, age",
    )

    prompt = build_error_prompt(_error_ctx(json_type_info=info), 200)

    assert "Type: Object" in prompt
    assert "name, age" in prompt


def test_success_prompt_includes_output_sample_and_type_info() -> None:
    info = JsonTypeInfo(root_type="Array", element_type="numbers", element_count=3, schema_hint="Array of 3 numbers")

    prompt = build_success_prompt(_success_ctx(json_type_info=info), 200)

    assert "optimize" in prompt
    assert "Query Output Sample" in prompt
    assert "1\n2\n3" in prompt
    assert "Type: Array" in prompt
    assert "Element type: numbers" in prompt
    assert "Element count: 3" in prompt


def test_success_prompt_truncates_output_without_sample() -> None:
    prompt = build_success_prompt(_success_ctx(output="x" * 1000, output_sample=None), 200)

    assert "[truncated]" in prompt
    assert "x" * 1000 not in prompt


def test_build_prompt_dispatches_on_success_flag() -> None:
    error_prompt = build_prompt(_error_ctx(), 200)
    success_prompt = build_prompt(_success_ctx(), 200)

    assert "troubleshoot" in error_prompt
    assert "troubleshoot" not in success_prompt
    assert "optimize" in success_prompt


def test_prompts_request_structured_numbered_suggestions() -> None:
    error_prompt = build_error_prompt(_error_ctx(), 200)
    success_prompt = build_success_prompt(_success_ctx(), 200)

    for label in ("[Fix]", "[Optimize]", "[Next]"):
        assert label in error_prompt
    for label in ("[Optimize]", "[Next]"):
        assert label in success_prompt
    assert "numbered suggestions" in error_prompt
    assert "numbered suggestions" in success_prompt


def test_prompts_mention_word_limit_and_natural_language() -> None:
    prompt = build_prompt(_error_ctx(), 300)

    assert "300 words" in prompt
    assert "Natural Language" in prompt
    assert "natural language" in prompt


class TestJsonTypeInfo:
    def test_object_keys(self) -> None:
        info = JsonTypeInfo.from_sample('{"name": "a", "age": 3}')

        assert info.root_type == "Object"
        assert info.top_level_keys == ["name", "age"]
        assert info.schema_hint == "Object with keys: name, age"

    def test_homogeneous_array(self) -> None:
        info = JsonTypeInfo.from_sample("[1, 2, 3]")

        assert info.root_type == "Array"
        assert info.element_type == "numbers"
        assert info.element_count == 3
        assert info.schema_hint == "Array of 3 numbers"

    def test_mixed_and_empty_arrays(self) -> None:
        assert JsonTypeInfo.from_sample('[1, "a"]').element_type == "mixed"
        assert JsonTypeInfo.from_sample("[]").schema_hint == "Empty array"

    def test_scalars_and_booleans(self) -> None:
        assert JsonTypeInfo.from_sample("true").root_type == "Boolean"
        assert JsonTypeInfo.from_sample("null").root_type == "Null"
        assert JsonTypeInfo.from_sample('"s"').root_type == "String"

    def test_unparseable_sample_yields_empty_info(self) -> None:
        info = JsonTypeInfo.from_sample('{"a": 1}\n{"a": 2}')

        assert info == JsonTypeInfo()
        assert info.describe() == ""


def test_query_context_builders_truncate_samples() -> None:
    big_input = "[" + ",".join("1" for _ in range(2_000)) + "]"

    ctx = QueryContext.for_success(".[]", 3, big_input, "1\n" * 1_000)

    assert ctx.is_success
    assert ctx.input_sample.endswith("[truncated]")
    assert ctx.output_sample.endswith("[truncated]")
    assert ctx.json_type_info.element_count == 2_000

    error_ctx = QueryContext.for_error(".[", 2, "{}", "unexpected end")
    assert not error_ctx.is_success
    assert error_ctx.error == "unexpected end"
    assert error_ctx.json_type_info.root_type == "Object"
