"""AI assistance pipeline: session state, worker, providers and suggestions."""

from .debouncer import Debouncer
from .errors import AiError, ApiError, CancelledError, NetworkError, NotConfiguredError, ParseError
from .events import Err, Ok, handle_execution_result, poll_response_channel, tick
from .messages import Cancel, Cancelled, Chunk, Complete, Error, Query
from .selection import SelectionState
from .state import AiSnapshot, AiState
from .suggestions import Suggestion, SuggestionType, parse_suggestions
from .worker import AiWorker, spawn_worker, start_ai_worker

__all__ = [
    "AiError",
    "AiSnapshot",
    "AiState",
    "AiWorker",
    "ApiError",
    "Cancel",
    "Cancelled",
    "CancelledError",
    "Chunk",
    "Complete",
    "Debouncer",
    "Err",
    "Error",
    "NetworkError",
    "NotConfiguredError",
    "Ok",
    "ParseError",
    "Query",
    "SelectionState",
    "Suggestion",
    "SuggestionType",
    "handle_execution_result",
    "parse_suggestions",
    "poll_response_channel",
    "spawn_worker",
    "start_ai_worker",
    "tick",
]
