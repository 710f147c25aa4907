"""Streaming AI providers and the settings-driven factory."""

from __future__ import annotations

from typing import Any

import httpx

from ...services.settings import AiSettings, ProviderType
from ..errors import NotConfiguredError
from .anthropic import AnthropicProvider
from .base import AiProvider, HttpStreamingProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider

__all__ = [
    "AiProvider",
    "HttpStreamingProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "from_settings",
    "provider_display_name",
]

_DISPLAY_NAMES = {
    ProviderType.ANTHROPIC: AnthropicProvider.name,
    ProviderType.OPENAI: OpenAIProvider.name,
    ProviderType.GEMINI: GeminiProvider.name,
}


def provider_display_name(provider: ProviderType) -> str:
    return _DISPLAY_NAMES[provider]


def from_settings(settings: AiSettings, *, client: httpx.Client | None = None) -> AiProvider:
    """Build the configured provider or raise :class:`NotConfiguredError`."""

    provider_type = settings.provider
    display = provider_display_name(provider_type)
    if not settings.enabled:
        raise NotConfiguredError(display, "AI is disabled in settings")

    common: dict[str, Any] = {
        "connect_timeout": settings.connect_timeout,
        "max_retries": settings.max_retries,
        "retry_min_seconds": settings.retry_min_seconds,
        "retry_max_seconds": settings.retry_max_seconds,
        "client": client,
    }
    section = provider_type.value
    if provider_type is ProviderType.ANTHROPIC:
        config = settings.anthropic
        return AnthropicProvider(
            api_key=_require(display, section, "API key", config.api_key),
            model=_require(display, section, "model", config.model),
            max_tokens=config.max_tokens,
            **common,
        )
    if provider_type is ProviderType.OPENAI:
        config = settings.openai
        base_url = _clean(config.base_url)
        api_key = _clean(config.api_key)
        if api_key is None and not OpenAIProvider.is_custom_base_url(base_url):
            raise NotConfiguredError(display, f"Missing or empty API key in [ai.{section}] settings")
        return OpenAIProvider(
            api_key=api_key,
            model=_require(display, section, "model", config.model),
            base_url=base_url,
            **common,
        )
    config = settings.gemini
    return GeminiProvider(
        api_key=_require(display, section, "API key", config.api_key),
        model=_require(display, section, "model", config.model),
        **common,
    )


def _clean(value: str | None) -> str | None:
    stripped = (value or "").strip()
    return stripped or None


def _require(display: str, section: str, label: str, value: str | None) -> str:
    cleaned = _clean(value)
    if cleaned is None:
        raise NotConfiguredError(display, f"Missing or empty {label} in [ai.{section}] settings")
    return cleaned
