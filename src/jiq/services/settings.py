"""AI settings dataclasses and override helpers.

Reading the configuration file is the caller's job; this module turns an
already-parsed mapping into typed settings and layers environment overrides
on top.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping

__all__ = [
    "ProviderType",
    "AnthropicSettings",
    "OpenAISettings",
    "GeminiSettings",
    "AiSettings",
    "apply_env_overrides",
    "redact_secret",
]

LOGGER = logging.getLogger(__name__)

_ENV_OVERRIDES: Mapping[str, str] = {
    "JIQ_AI_PROVIDER": "provider",
    "JIQ_AI_ANTHROPIC_API_KEY": "anthropic.api_key",
    "JIQ_AI_ANTHROPIC_MODEL": "anthropic.model",
    "JIQ_AI_OPENAI_API_KEY": "openai.api_key",
    "JIQ_AI_OPENAI_MODEL": "openai.model",
    "JIQ_AI_OPENAI_BASE_URL": "openai.base_url",
    "JIQ_AI_GEMINI_API_KEY": "gemini.api_key",
    "JIQ_AI_GEMINI_MODEL": "gemini.model",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "JIQ_AI_ENABLED": "enabled",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "JIQ_AI_DEBOUNCE_MS": "debounce_ms",
    "JIQ_AI_MAX_RETRIES": "max_retries",
    "JIQ_AI_ANTHROPIC_MAX_TOKENS": "anthropic.max_tokens",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "JIQ_AI_CONNECT_TIMEOUT": "connect_timeout",
}
_TRUE_VALUES = {"1", "true", "yes", "on"}


class ProviderType(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: Any) -> "ProviderType":
        if isinstance(value, ProviderType):
            return value
        token = str(value or "").strip().lower()
        for member in cls:
            if member.value == token:
                return member
        raise ValueError(f"Unknown AI provider: {value!r}")


@dataclass(slots=True)
class AnthropicSettings:
    api_key: str | None = None
    model: str | None = None
    max_tokens: int = 512


@dataclass(slots=True)
class OpenAISettings:
    """OpenAI or any OpenAI-compatible endpoint (Ollama, Groq, ...)."""

    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None


@dataclass(slots=True)
class GeminiSettings:
    api_key: str | None = None
    model: str | None = None


@dataclass(slots=True)
class AiSettings:
    """User-configurable AI assistant settings."""

    enabled: bool = False
    provider: ProviderType = ProviderType.ANTHROPIC
    debounce_ms: int = 1_000
    connect_timeout: float | None = 10.0
    max_retries: int = 3
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 6.0
    anthropic: AnthropicSettings = field(default_factory=AnthropicSettings)
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    gemini: GeminiSettings = field(default_factory=GeminiSettings)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "AiSettings":
        """Build settings from a parsed ``[ai]`` table, ignoring unknown keys."""

        settings = cls()
        if not payload:
            return settings
        flat: Dict[str, Any] = {}
        for key, value in payload.items():
            if key in _SECTION_TYPES and isinstance(value, Mapping):
                for sub_key, sub_value in value.items():
                    flat[f"{key}.{sub_key}"] = sub_value
            else:
                flat[key] = value
        return _apply_overrides(settings, flat, source="config")

    def provider_settings(self) -> AnthropicSettings | OpenAISettings | GeminiSettings:
        return getattr(self, self.provider.value)


_SECTION_TYPES: Mapping[str, type] = {
    "anthropic": AnthropicSettings,
    "openai": OpenAISettings,
    "gemini": GeminiSettings,
}


def apply_env_overrides(settings: AiSettings, environ: Mapping[str, str] | None = None) -> AiSettings:
    """Return ``settings`` with ``JIQ_AI_*`` environment variables applied."""

    env = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for env_name, field_name in _ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value is not None:
            overrides[field_name] = value
    for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value is not None:
            overrides[field_name] = value.strip().lower() in _TRUE_VALUES
    for env_name, field_name in _INT_ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value is None:
            continue
        try:
            overrides[field_name] = int(value, 10)
        except ValueError:
            LOGGER.warning(
                "Environment override %s=%s is not a valid integer",
                env_name,
                value,
            )
    for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value is None:
            continue
        try:
            overrides[field_name] = float(value)
        except ValueError:
            LOGGER.warning(
                "Environment override %s=%s is not a valid float", env_name, value
            )
    if overrides:
        settings = _apply_overrides(settings, overrides, source="environment")
    return settings


def _apply_overrides(
    settings: AiSettings,
    overrides: Mapping[str, Any],
    *,
    source: str = "runtime",
) -> AiSettings:
    allowed = {item.name for item in fields(AiSettings)} - set(_SECTION_TYPES)
    top_level: Dict[str, Any] = {}
    sections: Dict[str, Dict[str, Any]] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        section, _, name = key.partition(".")
        if name:
            section_type = _SECTION_TYPES.get(section)
            if section_type is None or name not in {item.name for item in fields(section_type)}:
                LOGGER.debug("Ignoring unknown %s setting %s", source, key)
                continue
            sections.setdefault(section, {})[name] = value
        elif key in allowed:
            top_level[key] = value
        else:
            LOGGER.debug("Ignoring unknown %s setting %s", source, key)

    if "provider" in top_level:
        try:
            top_level["provider"] = ProviderType.parse(top_level["provider"])
        except ValueError as exc:
            LOGGER.warning("Invalid %s provider override: %s", source, exc)
            top_level.pop("provider")

    for section, values in sections.items():
        top_level[section] = replace(getattr(settings, section), **values)

    if top_level:
        LOGGER.debug("Applying %s settings overrides: %s", source, sorted(top_level))
        settings = replace(settings, **top_level)
    return settings


def redact_secret(value: str | None) -> str:
    stripped = (value or "").strip()
    if not stripped:
        return ""
    if len(stripped) <= 4:
        return "*" * len(stripped)
    return f"{stripped[:2]}{'*' * (len(stripped) - 4)}{stripped[-2:]}"
