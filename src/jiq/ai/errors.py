"""Error taxonomy for AI provider calls."""

from __future__ import annotations

__all__ = [
    "AiError",
    "NotConfiguredError",
    "NetworkError",
    "ApiError",
    "ParseError",
    "CancelledError",
]


class AiError(Exception):
    """Base class for failures raised while talking to an AI provider."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        return f"[{self.provider}] {self.message}"


class NotConfiguredError(AiError):
    """Missing or invalid credentials/model, detected when the provider is built."""

    def _format(self) -> str:
        return f"[{self.provider}] AI not configured: {self.message}"


class NetworkError(AiError):
    """Transport failure while opening or reading the stream."""

    def _format(self) -> str:
        return f"[{self.provider}] Network error: {self.message}"


class ApiError(AiError):
    """The provider answered with a non-2xx status."""

    def __init__(self, provider: str, code: int, message: str) -> None:
        self.code = code
        super().__init__(provider, message)

    def _format(self) -> str:
        return f"[{self.provider}] API error ({self.code}): {self.message}"


class ParseError(AiError):
    """Malformed request or response encoding."""

    def _format(self) -> str:
        return f"[{self.provider}] Parse error: {self.message}"


class CancelledError(AiError):
    """User-initiated abort. Not a failure and never shown to the user."""

    def __init__(self) -> None:
        super().__init__("", "Request cancelled")

    def _format(self) -> str:
        return "Request cancelled"
