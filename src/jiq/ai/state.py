"""Session controller for the AI assistant.

:class:`AiState` lives on the UI thread. It owns the accumulated response, the
request id counter used to reject stale worker messages, and the parsed
suggestions with their selection. Nothing here blocks: responses are drained
with :meth:`AiState.poll` once per UI tick.
"""

from __future__ import annotations

import hashlib
import logging
import queue
from dataclasses import dataclass, field
from typing import Tuple

from .channel import ChannelClosed, Receiver, Sender
from .debouncer import DEFAULT_DEBOUNCE_MS, Debouncer
from .messages import AiRequest, AiResponse, Cancel, Cancelled, Chunk, Complete, Error, Query
from .prompt import DEFAULT_WORD_LIMIT
from .selection import SelectionState
from .suggestions import Suggestion, parse_suggestions

__all__ = ["AiState", "AiSnapshot", "WORKER_DISCONNECTED"]

LOGGER = logging.getLogger(__name__)

WORKER_DISCONNECTED = "AI worker disconnected"
_REQUEST_ID_MASK = (1 << 64) - 1


def _query_hash(query: str) -> int:
    digest = hashlib.blake2b(query.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


@dataclass(frozen=True, slots=True)
class AiSnapshot:
    """Read-only view handed to the renderer."""

    visible: bool
    enabled: bool
    configured: bool
    loading: bool
    error: str | None
    response: str
    previous_response: str | None
    suggestions: Tuple[Suggestion, ...]
    selected_index: int | None
    hovered_index: int | None
    navigation_active: bool


@dataclass(slots=True)
class AiState:
    """Per-session AI assistant state.

    ``loading`` stays true from :meth:`start_request` until the matching
    Complete, Error or Cancelled is applied, or the request is cancelled
    locally. ``suggestions`` is only populated by :meth:`complete_request`.
    """

    enabled: bool = False
    configured: bool = False
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    loading: bool = False
    error: str | None = None
    response: str = ""
    previous_response: str | None = None
    request_id: int = 0
    in_flight_request_id: int | None = None
    last_query_hash: int | None = None
    suggestions: list[Suggestion] = field(default_factory=list)
    selection: SelectionState = field(default_factory=SelectionState)
    word_limit: int = DEFAULT_WORD_LIMIT
    pending_prompt: str | None = None
    visible: bool = field(default=False, init=False)
    debouncer: Debouncer = field(init=False)
    request_tx: Sender[AiRequest] | None = field(default=None, init=False)
    response_rx: Receiver[AiResponse] | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.visible = self.enabled
        self.debouncer = Debouncer(self.debounce_ms)

    # ------------------------------------------------------------------
    # Wiring & visibility
    # ------------------------------------------------------------------
    def set_channels(self, request_tx: Sender[AiRequest], response_rx: Receiver[AiResponse]) -> None:
        self.request_tx = request_tx
        self.response_rx = response_rx

    def toggle(self) -> None:
        self.visible = not self.visible

    def close(self) -> None:
        self.visible = False

    # ------------------------------------------------------------------
    # Request lifecycle
    # ------------------------------------------------------------------
    def start_request(self) -> None:
        """Prepare for a new request; archives the previous answer while loading."""

        if self.response:
            self.previous_response = self.response
        self.response = ""
        self.error = None
        self.loading = True
        self.request_id = (self.request_id + 1) & _REQUEST_ID_MASK
        self.in_flight_request_id = self.request_id
        self.suggestions = []
        self.selection.clear_selection()

    def send_request(self, prompt: str) -> bool:
        """Start a request and enqueue it for the worker.

        Returns False without touching state when no worker is attached.
        """

        if self.request_tx is None:
            return False
        self.start_request()
        sent = self.request_tx.send(Query(prompt, self.request_id))
        if sent:
            LOGGER.debug("Queued AI request %s (%s chars)", self.request_id, len(prompt))
        else:
            LOGGER.warning("AI request channel closed; request %s not sent", self.request_id)
        return sent

    def append_chunk(self, text: str) -> None:
        self.response += text

    def complete_request(self) -> None:
        self.loading = False
        self.previous_response = None
        self.in_flight_request_id = None
        self.suggestions = parse_suggestions(self.response)
        self.selection.clear_selection()
        LOGGER.debug("AI request %s complete with %s suggestion(s)", self.request_id, len(self.suggestions))

    def set_error(self, message: str) -> None:
        self.error = message
        self.loading = False
        self.in_flight_request_id = None

    def cancel_in_flight_request(self) -> bool:
        """Ask the worker to abandon the in-flight request.

        Returns True if a Cancel was enqueued. When nothing is in flight, or
        the worker is unreachable, nothing changes.
        """

        request_id = self.in_flight_request_id
        if request_id is None or self.request_tx is None:
            return False
        if not self.request_tx.send(Cancel(request_id)):
            return False
        LOGGER.debug("Sent cancel for AI request %s", request_id)
        self.in_flight_request_id = None
        self.loading = False
        return True

    def has_in_flight_request(self) -> bool:
        return self.in_flight_request_id is not None

    def current_request_id(self) -> int:
        return self.request_id

    # ------------------------------------------------------------------
    # Query change detection
    # ------------------------------------------------------------------
    def is_query_changed(self, query: str) -> bool:
        return self.last_query_hash is None or self.last_query_hash != _query_hash(query)

    def set_last_query_hash(self, query: str) -> None:
        self.last_query_hash = _query_hash(query)

    def clear_stale_response(self) -> None:
        """Drop advice that was produced for a different query."""

        self.response = ""
        self.error = None
        self.previous_response = None
        self.loading = False
        self.suggestions = []
        self.selection.clear_selection()

    def clear_on_success(self) -> None:
        self.response = ""
        self.error = None
        self.previous_response = None
        self.loading = False

    # ------------------------------------------------------------------
    # Response handling
    # ------------------------------------------------------------------
    def poll(self) -> int:
        """Drain every available worker response; returns how many were applied."""

        if self.response_rx is None:
            return 0
        applied = 0
        while True:
            try:
                response = self.response_rx.try_recv()
            except queue.Empty:
                break
            except ChannelClosed:
                self._handle_disconnect()
                break
            if self.handle_response(response):
                applied += 1
        return applied

    def handle_response(self, response: AiResponse) -> bool:
        """Apply ``response`` if it belongs to the current, still outstanding request.

        After a local cancel only the worker's ``Cancelled`` acknowledgement is
        accepted; chunks and results it had already queued are dropped.
        """

        if response.request_id != self.request_id:
            LOGGER.debug(
                "Discarding stale %s for request %s (current %s)",
                type(response).__name__,
                response.request_id,
                self.request_id,
            )
            return False
        if not isinstance(response, Cancelled) and self.in_flight_request_id != response.request_id:
            LOGGER.debug(
                "Discarding %s for request %s; it is no longer in flight",
                type(response).__name__,
                response.request_id,
            )
            return False
        if isinstance(response, Chunk):
            self.append_chunk(response.text)
        elif isinstance(response, Complete):
            self.complete_request()
        elif isinstance(response, Error):
            self.set_error(response.message)
        elif isinstance(response, Cancelled):
            self.loading = False
            self.in_flight_request_id = None
        return True

    def _handle_disconnect(self) -> None:
        LOGGER.warning("AI response channel closed")
        self.response_rx = None
        if self.loading:
            self.set_error(WORKER_DISCONNECTED)

    def snapshot(self) -> AiSnapshot:
        return AiSnapshot(
            visible=self.visible,
            enabled=self.enabled,
            configured=self.configured,
            loading=self.loading,
            error=self.error,
            response=self.response,
            previous_response=self.previous_response,
            suggestions=tuple(self.suggestions),
            selected_index=self.selection.selected_index,
            hovered_index=self.selection.hovered_index,
            navigation_active=self.selection.navigation_active,
        )
