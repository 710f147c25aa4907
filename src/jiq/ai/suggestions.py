"""Structured suggestions parsed from a completed AI response.

The model is asked to answer in the form::

    1. [Fix] .users[] | select(.active)
       Filters to only active users

    2. [Next] .users[] | .email
       Extracts email addresses from users

Parsing is tolerant: anything that does not look like an entry is skipped and
malformed text simply yields no suggestions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

__all__ = ["SuggestionType", "Suggestion", "parse_suggestions"]

_ENTRY_PATTERN = re.compile(r"^(?P<ordinal>\d+)\.\s+\[(?P<label>[^\]]*)\](?P<query>.*)$")


class SuggestionType(str, Enum):
    FIX = "fix"
    OPTIMIZE = "optimize"
    NEXT = "next"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: str) -> "SuggestionType":
        token = (label or "").strip().lower()
        for member in (cls.FIX, cls.OPTIMIZE, cls.NEXT):
            if member.value == token:
                return member
        return cls.OTHER

    @property
    def label(self) -> str:
        return f"[{self.value.capitalize()}]"


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A single suggested jq query with its explanation."""

    query: str
    description: str
    kind: SuggestionType


def parse_suggestions(response: str) -> list[Suggestion]:
    """Parse every ``N. [Label] query`` entry in ``response``, in text order."""

    if not response:
        return []
    lines = response.splitlines()
    suggestions: list[Suggestion] = []
    index = 0
    while index < len(lines):
        parsed = _parse_entry(lines[index].strip())
        if parsed is None:
            index += 1
            continue
        kind, query = parsed
        description, consumed = _collect_description(lines[index + 1 :])
        suggestions.append(Suggestion(query=query, description=description, kind=kind))
        index += 1 + consumed
    return suggestions


def _parse_entry(line: str) -> tuple[SuggestionType, str] | None:
    match = _ENTRY_PATTERN.match(line)
    if match is None:
        return None
    query = _strip_backticks(match.group("query").strip())
    if not query:
        return None
    return SuggestionType.from_label(match.group("label")), query


def _strip_backticks(query: str) -> str:
    if len(query) > 2 and query.startswith("`") and query.endswith("`"):
        return query[1:-1].strip()
    return query


def _collect_description(remaining: Sequence[str]) -> tuple[str, int]:
    """Return the joined description and how many lines it consumed.

    A blank line terminates the entry and is consumed with it; the next
    entry line terminates it without being consumed.
    """

    parts: list[str] = []
    consumed = 0
    for raw in remaining:
        text = raw.strip()
        if not text:
            consumed += 1
            break
        if _ENTRY_PATTERN.match(text):
            break
        parts.append(text)
        consumed += 1
    return " ".join(parts), consumed
