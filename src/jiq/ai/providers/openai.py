"""OpenAI chat completions provider.

Also serves OpenAI-compatible endpoints (Ollama, Groq, LM Studio, ...) through
``base_url``; those may run without an API key.
"""

from __future__ import annotations

from typing import Any, Dict

from .base import HttpStreamingProvider
from .sse import OpenAIEventParser, SseEventParser

__all__ = ["OpenAIProvider", "OPENAI_DEFAULT_BASE_URL"]

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
_COMPLETIONS_PATH = "/chat/completions"


class OpenAIProvider(HttpStreamingProvider):
    name = "OpenAI"

    def __init__(self, *, api_key: str | None, model: str, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(api_key=api_key, model=model, **kwargs)
        self.base_url = base_url

    @staticmethod
    def is_custom_base_url(base_url: str | None) -> bool:
        if not base_url or not base_url.strip():
            return False
        return not base_url.strip().startswith("https://api.openai.com")

    def is_custom_endpoint(self) -> bool:
        """True when requests go somewhere other than api.openai.com."""

        return self.is_custom_base_url(self.base_url)

    def build_url(self) -> str:
        base = (self.base_url or OPENAI_DEFAULT_BASE_URL).strip().rstrip("/")
        if base.endswith(_COMPLETIONS_PATH):
            return base
        return f"{base}{_COMPLETIONS_PATH}"

    def build_headers(self) -> Dict[str, str]:
        key = (self.api_key or "").strip()
        return {"Authorization": f"Bearer {key}"} if key else {}

    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "stream": True,
            "messages": [{"role": "user", "content": prompt}],
        }

    def create_event_parser(self) -> SseEventParser:
        return OpenAIEventParser()
