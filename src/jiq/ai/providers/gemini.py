"""Google Gemini ``streamGenerateContent`` provider."""

from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

from .base import HttpStreamingProvider
from .sse import GeminiEventParser, SseEventParser

__all__ = ["GeminiProvider", "GEMINI_API_BASE"]

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiProvider(HttpStreamingProvider):
    name = "Gemini"

    def build_url(self) -> str:
        # Gemini authenticates through the query string rather than a header.
        return (
            f"{GEMINI_API_BASE}/{quote(self.model, safe='-._')}:streamGenerateContent"
            f"?alt=sse&key={quote(self.api_key or '', safe='')}"
        )

    def build_headers(self) -> Dict[str, str]:
        return {}

    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def create_event_parser(self) -> SseEventParser:
        return GeminiEventParser()
