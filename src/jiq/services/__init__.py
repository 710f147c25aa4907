"""Service layer helpers (settings)."""

from .settings import AiSettings, ProviderType, apply_env_overrides, redact_secret

__all__ = ["AiSettings", "ProviderType", "apply_env_overrides", "redact_secret"]
