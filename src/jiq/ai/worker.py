"""Background worker that turns requests into streamed, tagged responses.

The worker owns the provider and runs on its own thread so the UI never blocks
on network I/O. Cancellation is cooperative: the request channel is drained
between text deltas, never while a read is outstanding.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, List

from ..services.settings import AiSettings
from .channel import ChannelClosed, Receiver, Sender, channel
from .errors import AiError, CancelledError
from .messages import AiRequest, AiResponse, Cancel, Cancelled, Chunk, Complete, Error, Query
from .providers import AiProvider, from_settings

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .state import AiState

__all__ = ["AiWorker", "CancellationCheck", "spawn_worker", "start_ai_worker"]

LOGGER = logging.getLogger(__name__)

WORKER_THREAD_NAME = "jiq-ai-worker"


@dataclass(slots=True)
class CancellationCheck:
    """Outcome of draining the request channel between two deltas."""

    cancelled: bool = False
    superseded: bool = False
    shutdown: bool = False
    backlog: List[AiRequest] = field(default_factory=list)

    @property
    def should_stop(self) -> bool:
        return self.cancelled or self.superseded or self.shutdown


class AiWorker:
    """Processes :class:`Query`/:class:`Cancel` requests one at a time.

    ``provider`` is None when construction failed; ``config_error`` then holds
    the reason, reported back for every query.
    """

    def __init__(
        self,
        provider: AiProvider | None,
        request_rx: Receiver[AiRequest],
        response_tx: Sender[AiResponse],
        *,
        config_error: AiError | None = None,
    ) -> None:
        self._provider = provider
        self._config_error = config_error
        self._request_rx = request_rx
        self._response_tx = response_tx
        self._backlog: Deque[AiRequest] = deque()
        self._shutdown = False

    def run(self) -> None:
        """Serve requests until the request channel's sender is closed."""

        LOGGER.debug("AI worker started (provider=%r)", self._provider)
        try:
            while not self._shutdown:
                try:
                    request = self._next_request()
                except ChannelClosed:
                    break
                if isinstance(request, Cancel):
                    # Nothing is streaming, so the cancel is acknowledged as-is.
                    self._emit(Cancelled(request.request_id))
                else:
                    self._process_query(request)
        finally:
            LOGGER.debug("AI worker shutting down")
            if self._provider is not None:
                self._provider.close()
            self._response_tx.close()

    def check_for_cancellation(self, request_id: int) -> CancellationCheck:
        """Drain pending requests without blocking while ``request_id`` streams.

        A matching :class:`Cancel` stops the stream. A new :class:`Query`
        supersedes it; that query and everything sent after it are kept for
        processing once the current stream has been torn down. Cancels for
        other ids that arrive before any new query are ignored.
        """

        check = CancellationCheck()
        while True:
            try:
                request = self._request_rx.try_recv()
            except queue.Empty:
                break
            except ChannelClosed:
                check.shutdown = True
                break
            if check.superseded:
                check.backlog.append(request)
            elif isinstance(request, Query):
                check.superseded = True
                check.backlog.append(request)
            elif request.request_id == request_id:
                check.cancelled = True
            else:
                LOGGER.debug(
                    "Ignoring cancel for request %s while streaming request %s",
                    request.request_id,
                    request_id,
                )
        return check

    def _next_request(self) -> AiRequest:
        if self._backlog:
            return self._backlog.popleft()
        return self._request_rx.recv()

    def _process_query(self, query: Query) -> None:
        request_id = query.request_id
        if any(isinstance(item, Query) for item in self._backlog):
            LOGGER.warning("Dropping superseded AI query %s", request_id)
            return
        for item in list(self._backlog):
            if isinstance(item, Cancel) and item.request_id == request_id:
                self._backlog.remove(item)
                self._emit(Cancelled(request_id))
                return

        if self._provider is None:
            message = str(self._config_error) if self._config_error else "AI not configured"
            self._emit(Error(message, request_id))
            return

        LOGGER.debug("Streaming AI request %s", request_id)
        stream = self._provider.stream(query.prompt)
        try:
            for text in stream:
                check = self.check_for_cancellation(request_id)
                self._backlog.extend(check.backlog)
                if check.shutdown:
                    self._shutdown = True
                    return
                if check.should_stop:
                    LOGGER.debug("AI request %s cancelled mid-stream", request_id)
                    self._emit(Cancelled(request_id))
                    return
                if text and not self._emit(Chunk(text, request_id)):
                    return
        except CancelledError:
            LOGGER.debug("AI request %s aborted by provider", request_id)
            self._emit(Cancelled(request_id))
            return
        except AiError as exc:
            LOGGER.info("AI request %s failed: %s", request_id, exc)
            self._emit(Error(str(exc), request_id))
            return
        except Exception as exc:
            LOGGER.exception("Unexpected failure while streaming AI request %s", request_id)
            self._emit(Error(f"Unexpected error: {exc}", request_id))
            return
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
        self._emit(Complete(request_id))

    def _emit(self, response: AiResponse) -> bool:
        sent = self._response_tx.send(response)
        if not sent:
            LOGGER.debug("Response channel closed; dropping %s", type(response).__name__)
        return sent


def spawn_worker(
    settings: AiSettings,
    request_rx: Receiver[AiRequest],
    response_tx: Sender[AiResponse],
    *,
    provider: AiProvider | None = None,
) -> threading.Thread:
    """Build the provider from ``settings`` and start the worker thread.

    Provider construction errors are captured and reported for each query
    rather than raised here, so the UI can start without AI configured.
    """

    config_error: AiError | None = None
    if provider is None:
        try:
            provider = from_settings(settings)
        except AiError as exc:
            LOGGER.info("AI provider unavailable: %s", exc)
            config_error = exc
    worker = AiWorker(provider, request_rx, response_tx, config_error=config_error)
    thread = threading.Thread(target=worker.run, name=WORKER_THREAD_NAME, daemon=True)
    thread.start()
    return thread


def start_ai_worker(
    state: "AiState",
    settings: AiSettings,
    *,
    provider: AiProvider | None = None,
) -> threading.Thread:
    """Create the channel pair, attach it to ``state`` and spawn the worker."""

    request_tx, request_rx = channel()
    response_tx, response_rx = channel()
    state.set_channels(request_tx, response_rx)
    return spawn_worker(settings, request_rx, response_tx, provider=provider)
