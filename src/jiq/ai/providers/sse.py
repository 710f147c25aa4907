"""Provider-independent Server-Sent Events decoding.

:class:`SseParser` owns the buffering: network chunks may split a line, or a
multi-byte character, anywhere. Complete ``data:`` payloads are handed to a
provider-specific :class:`SseEventParser` which pulls the text delta out of
the JSON frame.
"""

from __future__ import annotations

import codecs
import json
import logging
from abc import ABC, abstractmethod
from typing import Any

__all__ = [
    "SseEventParser",
    "SseParser",
    "AnthropicEventParser",
    "OpenAIEventParser",
    "GeminiEventParser",
    "DONE_SENTINEL",
]

LOGGER = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"
_DATA_PREFIX = "data: "
_EVENT_PREFIX = "event:"


class SseEventParser(ABC):
    """Extracts text from one provider's ``data:`` payloads."""

    def parse_data(self, data: str) -> str | None:
        """Return the text carried by ``data`` or None for control/unparseable frames."""

        try:
            payload = json.loads(data)
        except ValueError:
            LOGGER.debug("Skipping malformed SSE data line: %r", data[:200])
            return None
        try:
            return self.extract(payload)
        except (AttributeError, IndexError, KeyError, TypeError):
            LOGGER.debug("SSE payload did not match the expected shape: %r", data[:200])
            return None

    def is_done(self, data: str) -> bool:
        return data == DONE_SENTINEL

    @abstractmethod
    def extract(self, payload: Any) -> str | None:
        """Pull the text delta out of a decoded JSON frame."""


class AnthropicEventParser(SseEventParser):
    """``{"type": "content_block_delta", "delta": {"text": "..."}}``"""

    def extract(self, payload: Any) -> str | None:
        if payload.get("type") != "content_block_delta":
            return None
        text = payload["delta"].get("text")
        return text if isinstance(text, str) else None


class OpenAIEventParser(SseEventParser):
    """``{"choices": [{"delta": {"content": "..."}}]}``"""

    def extract(self, payload: Any) -> str | None:
        choices = payload.get("choices") or []
        if not choices:
            return None
        content = choices[0].get("delta", {}).get("content")
        return content if isinstance(content, str) else None


class GeminiEventParser(SseEventParser):
    """``{"candidates": [{"content": {"parts": [{"text": "..."}]}}]}``"""

    def extract(self, payload: Any) -> str | None:
        candidates = payload.get("candidates") or []
        if not candidates:
            return None
        parts = candidates[0].get("content", {}).get("parts") or []
        texts = [part["text"] for part in parts if isinstance(part.get("text"), str)]
        return "".join(texts) if texts else None


class SseParser:
    """Line-buffering SSE decoder."""

    def __init__(self, parser: SseEventParser) -> None:
        self._parser = parser
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        self._buffer = ""
        self._done = False

    @property
    def done(self) -> bool:
        """True once the provider's end-of-stream sentinel has been seen."""

        return self._done

    def feed(self, chunk: bytes) -> list[str]:
        """Consume a network chunk and return the text deltas it completed."""

        if self._done:
            return []
        self._buffer += self._decoder.decode(chunk)
        results: list[str] = []
        while not self._done:
            newline = self._buffer.find("\n")
            if newline < 0:
                break
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1 :]
            text = self._process_line(line)
            if text:
                results.append(text)
        if self._done:
            self._buffer = ""
        return results

    def flush(self) -> list[str]:
        """Process whatever is left once the connection has closed."""

        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        if self._done:
            return []
        text = self._process_line(remainder)
        return [text] if text else []

    def _process_line(self, raw: str) -> str | None:
        line = raw.strip()
        if not line or line.startswith(_EVENT_PREFIX):
            return None
        if not line.startswith(_DATA_PREFIX):
            return None
        data = line[len(_DATA_PREFIX) :]
        if self._parser.is_done(data):
            self._done = True
            return None
        return self._parser.parse_data(data)
