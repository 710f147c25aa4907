"""Bootstrap helpers wiring settings, logging and the AI session together."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from dataclasses import asdict
from typing import Any, Dict, Mapping, Sequence, TextIO, get_args, get_origin, get_type_hints

from .ai.events import poll_response_channel
from .ai.state import AiState
from .ai.worker import start_ai_worker
from .services.settings import (
    AiSettings,
    AnthropicSettings,
    GeminiSettings,
    OpenAISettings,
    apply_env_overrides,
    redact_secret,
)
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)
_POLL_INTERVAL_SECONDS = 0.05
_SECTION_CLASSES = {
    "anthropic": AnthropicSettings,
    "openai": OpenAISettings,
    "gemini": GeminiSettings,
}


def configure_logging(debug: bool = False, *, console: bool = False, force: bool = False) -> None:
    """Route logs to the jiq log file; ``debug`` wins over ``JIQ_LOG_LEVEL``."""

    log_path = logging_utils.setup_logging(logging.DEBUG if debug else None, console=console, force=force)
    _LOGGER.debug("Logging to %s", log_path)


def load_settings(
    payload: Mapping[str, Any] | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AiSettings:
    """Build AI settings from an already-parsed ``[ai]`` table.

    Layering order: ``payload``, then ``JIQ_AI_*`` environment variables, then
    explicit ``overrides`` (dotted keys such as ``openai.base_url``).
    """

    settings = AiSettings.from_mapping(payload)
    settings = apply_env_overrides(settings, environ)
    if overrides:
        settings = AiSettings.from_mapping({**_flatten(settings), **overrides})
    return settings


def create_ai_session(settings: AiSettings, *, start_worker: bool = True) -> AiState:
    """Return an :class:`AiState` for ``settings``, with its worker running."""

    configured = settings.enabled and _has_credentials(settings)
    state = AiState(enabled=settings.enabled, configured=configured, debounce_ms=settings.debounce_ms)
    if start_worker:
        start_ai_worker(state, settings)
    _LOGGER.debug(
        "AI session created (enabled=%s, configured=%s, provider=%s)",
        settings.enabled,
        configured,
        settings.provider.value,
    )
    return state


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``jiq-ai`` console script.

    Streams one prompt through the configured provider and prints the answer
    followed by the parsed suggestions.
    """

    args = _parse_cli_args(argv)
    debug = args.debug or _env_flag("JIQ_DEBUG")
    configure_logging(debug)

    try:
        overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
    settings = load_settings(overrides=overrides or None)

    if args.dump_settings:
        _dump_settings(settings)
        return 0
    if not args.prompt:
        print("Nothing to do: pass a prompt or --dump-settings.", file=sys.stderr)
        return 2

    state = create_ai_session(settings)
    if not state.send_request(" ".join(args.prompt)):
        print("AI worker unavailable.", file=sys.stderr)
        return 1
    return _stream_to(state, sys.stdout)


def _stream_to(state: AiState, destination: TextIO) -> int:
    written = 0
    try:
        while True:
            poll_response_channel(state)
            if len(state.response) > written:
                destination.write(state.response[written:])
                destination.flush()
                written = len(state.response)
            if not state.loading:
                break
            time.sleep(_POLL_INTERVAL_SECONDS)
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown path
        state.cancel_in_flight_request()
        _LOGGER.info("Request interrupted by user.")
        return 130
    finally:
        if state.request_tx is not None:
            state.request_tx.close()

    destination.write("\n")
    if state.error:
        print(state.error, file=sys.stderr)
        return 1
    for index, suggestion in enumerate(state.suggestions, start=1):
        destination.write(f"{index}. {suggestion.kind.label} {suggestion.query}\n")
    return 0


def _has_credentials(settings: AiSettings) -> bool:
    section = settings.provider_settings()
    if not (section.model or "").strip():
        return False
    if (section.api_key or "").strip():
        return True
    return isinstance(section, OpenAISettings) and bool((section.base_url or "").strip())


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="jiq-ai",
        description="Ask the configured AI provider for jq suggestions, or inspect AI settings.",
    )
    parser.add_argument("prompt", nargs="*", help="Prompt text sent to the provider.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective AI settings (with secrets redacted) and exit.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override an AI setting, e.g. provider=openai or openai.model=gpt-4o-mini (repeatable).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        section, _, name = key.partition(".")
        owner = _SECTION_CLASSES.get(section) if name else AiSettings
        field_name = name or key
        if owner is None or field_name in _SECTION_CLASSES or field_name not in owner.__dataclass_fields__:
            raise ValueError(f"Unknown setting '{key}'.")
        annotation = get_type_hints(owner).get(field_name, str)
        overrides[key] = _coerce_value(annotation, raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    target = _resolve_annotation(annotation)
    if raw_value.lower() in {"none", "null"}:
        return None
    if target is bool:
        return _parse_bool(raw_value)
    if target is int:
        return int(raw_value, 10)
    if target is float:
        return float(raw_value)
    return raw_value


def _resolve_annotation(annotation: Any) -> Any:
    if get_origin(annotation) is None:
        return annotation
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    return args[0] if args else annotation


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _flatten(settings: AiSettings) -> Dict[str, Any]:
    payload = asdict(settings)
    payload["provider"] = settings.provider.value
    return payload


def _dump_settings(settings: AiSettings, *, stream: TextIO | None = None) -> None:
    destination = stream or sys.stdout
    payload = _flatten(settings)
    for section in _SECTION_CLASSES:
        payload[section]["api_key"] = redact_secret(payload[section].get("api_key"))
    output = {
        "settings": payload,
        "meta": {
            "log_path": str(logging_utils.get_log_path() or ""),
            "environment_variables": sorted(name for name in os.environ if name.startswith("JIQ_")),
        },
    }
    json.dump(output, destination, indent=2)
    destination.write("\n")
