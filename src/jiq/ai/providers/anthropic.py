"""Anthropic Messages API provider."""

from __future__ import annotations

from typing import Any, Dict

from .base import HttpStreamingProvider
from .sse import AnthropicEventParser, SseEventParser

__all__ = ["AnthropicProvider", "ANTHROPIC_API_URL", "ANTHROPIC_VERSION"]

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HttpStreamingProvider):
    name = "Anthropic"

    def __init__(self, *, api_key: str, model: str, max_tokens: int = 512, **kwargs: Any) -> None:
        super().__init__(api_key=api_key, model=model, **kwargs)
        self.max_tokens = max_tokens

    def build_url(self) -> str:
        return ANTHROPIC_API_URL

    def build_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "stream": True,
            "messages": [{"role": "user", "content": prompt}],
        }

    def create_event_parser(self) -> SseEventParser:
        return AnthropicEventParser()
