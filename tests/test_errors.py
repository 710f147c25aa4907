"""Tests for the AI error taxonomy."""

from __future__ import annotations

import pytest

from jiq.ai.errors import AiError, ApiError, CancelledError, NetworkError, NotConfiguredError, ParseError


class TestErrorMessages:
    """User-facing messages carry the provider name."""

    def test_not_configured(self) -> None:
        error = NotConfiguredError("Anthropic", "Missing or empty API key")

        assert str(error) == "[Anthropic] AI not configured: Missing or empty API key"
        assert error.provider == "Anthropic"

    def test_network(self) -> None:
        assert str(NetworkError("OpenAI", "timed out")) == "[OpenAI] Network error: timed out"

    def test_api(self) -> None:
        error = ApiError("Gemini", 429, "quota exceeded")

        assert str(error) == "[Gemini] API error (429): quota exceeded"
        assert error.code == 429
        assert error.message == "quota exceeded"

    def test_parse(self) -> None:
        assert str(ParseError("Anthropic", "bad body")) == "[Anthropic] Parse error: bad body"

    def test_cancelled_has_no_provider(self) -> None:
        assert str(CancelledError()) == "Request cancelled"


@pytest.mark.parametrize(
    "error",
    [
        NotConfiguredError("P", "m"),
        NetworkError("P", "m"),
        ApiError("P", 500, "m"),
        ParseError("P", "m"),
        CancelledError(),
    ],
)
def test_all_errors_share_base_class(error: AiError) -> None:
    assert isinstance(error, AiError)
    assert isinstance(error, Exception)
