"""Prompt templates for the jq assistant."""

from __future__ import annotations

from .context import MAX_OUTPUT_SAMPLE_CHARS, QueryContext, truncate_text

__all__ = ["DEFAULT_WORD_LIMIT", "build_prompt", "build_error_prompt", "build_success_prompt"]

DEFAULT_WORD_LIMIT = 200


def build_prompt(ctx: QueryContext, word_limit: int = DEFAULT_WORD_LIMIT) -> str:
    """Pick the troubleshooting or optimisation prompt for ``ctx``."""

    if ctx.is_success:
        return build_success_prompt(ctx, word_limit)
    return build_error_prompt(ctx, word_limit)


def build_error_prompt(ctx: QueryContext, word_limit: int = DEFAULT_WORD_LIMIT) -> str:
    sections = [
        "You are a jq expert. Help troubleshoot this failing jq query.",
        _query_section(ctx),
        f"## Error\n{ctx.error or 'unknown error'}",
        _input_section(ctx),
        _natural_language_section(),
        _format_section(word_limit, ("Fix", "Optimize", "Next")),
    ]
    return "\n\n".join(section for section in sections if section)


def build_success_prompt(ctx: QueryContext, word_limit: int = DEFAULT_WORD_LIMIT) -> str:
    sections = [
        "You are a jq expert. This jq query ran successfully. Suggest ways to optimize it "
        "or useful next steps.",
        _query_section(ctx),
        _input_section(ctx),
        f"## Query Output Sample\n{_output_sample(ctx)}",
        _natural_language_section(),
        _format_section(word_limit, ("Optimize", "Next")),
    ]
    return "\n\n".join(section for section in sections if section)


def _query_section(ctx: QueryContext) -> str:
    return f"## Query\n{ctx.query}\nCursor position: {ctx.cursor_pos}"


def _input_section(ctx: QueryContext) -> str:
    parts = [f"## Input JSON Sample\n{ctx.input_sample}"]
    structure = ctx.json_type_info.describe()
    if structure:
        parts.append(f"## Input Structure\n{structure}")
    return "\n\n".join(parts)


def _output_sample(ctx: QueryContext) -> str:
    if ctx.output_sample is not None:
        return ctx.output_sample
    return truncate_text(ctx.output or "", MAX_OUTPUT_SAMPLE_CHARS)


def _natural_language_section() -> str:
    return (
        "## Natural Language Queries\n"
        "The query may be written in natural language instead of jq (for example "
        "\"show active users\"). If so, interpret the intent against the input "
        "structure and suggest jq queries that accomplish it."
    )


def _format_section(word_limit: int, labels: tuple[str, ...]) -> str:
    label_list = ", ".join(f"[{label}]" for label in labels)
    return (
        "## Response Format\n"
        f"Respond with up to 5 numbered suggestions using the labels {label_list}, "
        "each on its own line followed by a one-line description:\n"
        f"1. [{labels[0]}] <jq query>\n"
        "   <what it does>\n\n"
        f"Write the query without backticks. Keep the whole answer under {word_limit} words."
    )
