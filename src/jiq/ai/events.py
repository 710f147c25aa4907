"""UI-thread glue between query execution and the AI session.

The application calls :func:`handle_execution_result` after each jq run and
:func:`poll_response_channel` plus :func:`tick` once per event-loop tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .context import QueryContext
from .prompt import build_prompt
from .state import AiState

__all__ = ["Ok", "Err", "ExecutionResult", "handle_execution_result", "poll_response_channel", "tick"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ok:
    """jq ran successfully and produced ``output``."""

    output: str


@dataclass(frozen=True, slots=True)
class Err:
    """jq rejected the query with ``message``."""

    message: str


ExecutionResult = Union[Ok, Err]


def poll_response_channel(state: AiState) -> int:
    """Apply pending worker responses to ``state`` without blocking."""

    return state.poll()


def handle_execution_result(
    state: AiState,
    result: ExecutionResult,
    query: str,
    cursor_pos: int,
    input_json: str,
    *,
    now_ms: int | None = None,
) -> bool:
    """React to a finished jq run; returns True if a prompt was scheduled.

    Unchanged queries are ignored. A changed query clears the stale answer,
    cancels whatever is in flight and, when the assistant is enabled and
    visible, arms the debouncer with a fresh prompt.
    """

    if not state.is_query_changed(query):
        return False
    state.set_last_query_hash(query)
    state.clear_stale_response()
    state.cancel_in_flight_request()

    if not (state.enabled and state.visible):
        state.pending_prompt = None
        state.debouncer.cancel()
        return False

    if isinstance(result, Ok):
        ctx = QueryContext.for_success(query, cursor_pos, input_json, result.output)
    else:
        ctx = QueryContext.for_error(query, cursor_pos, input_json, result.message)
    state.pending_prompt = build_prompt(ctx, state.word_limit)
    state.debouncer.reset(now_ms)
    return True


def tick(state: AiState, now_ms: int | None = None) -> bool:
    """Send the pending prompt once the debounce window has elapsed."""

    if state.pending_prompt is None or not state.debouncer.ready(now_ms):
        return False
    prompt = state.pending_prompt
    state.pending_prompt = None
    state.debouncer.cancel()
    state.cancel_in_flight_request()
    sent = state.send_request(prompt)
    if not sent:
        LOGGER.debug("Debounced AI prompt dropped; no worker attached")
    return sent
