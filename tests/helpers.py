"""Shared test helpers and stub classes.

This module contains reusable test stubs that are used across multiple test files.
Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import queue
import threading
from typing import Callable, Dict, Iterator, List, Sequence

from jiq.ai.channel import ChannelClosed, Receiver, channel
from jiq.ai.messages import Cancelled, Complete, Error
from jiq.ai.worker import AiWorker


class ScriptedProvider:
    """Provider stub that replays fixed deltas.

    ``hooks`` maps a delta index to a callable run just before that delta is
    yielded on the first stream; tests use it to inject requests mid-stream.
    ``error`` is raised after the deltas when set.

    Example:
        provider = ScriptedProvider(["Hel", "lo"], hooks={1: lambda: tx.send(Cancel(1))})
    """

    name = "Scripted"

    def __init__(
        self,
        deltas: Sequence[str],
        *,
        hooks: Dict[int, Callable[[], object]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.deltas = list(deltas)
        self.hooks = dict(hooks or {})
        self.error = error
        self.prompts: List[str] = []
        self.streams_closed = 0
        self.closed = False

    def stream(self, prompt: str) -> Iterator[str]:
        self.prompts.append(prompt)
        hooks, self.hooks = self.hooks, {}
        try:
            for index, delta in enumerate(self.deltas):
                hook = hooks.get(index)
                if hook is not None:
                    hook()
                yield delta
            if self.error is not None:
                raise self.error
        finally:
            self.streams_closed += 1

    def close(self) -> None:
        self.closed = True


def drain(receiver: Receiver, *, timeout: float = 2.0, until: Callable[[object], bool] | None = None) -> list:
    """Collect responses until the channel closes, ``until`` matches, or ``timeout`` passes."""

    collected: list = []
    while True:
        try:
            item = receiver.recv(timeout=timeout)
        except (ChannelClosed, queue.Empty):
            return collected
        collected.append(item)
        if until is not None and until(item):
            return collected


class WorkerHarness:
    """Runs an :class:`~jiq.ai.worker.AiWorker` on a thread for the duration of a ``with`` block.

    Leaving the block closes the request channel and joins the thread, so
    ``response_rx`` is closed afterwards.
    """

    def __init__(self, provider, *, config_error=None) -> None:
        self.request_tx, request_rx = channel()
        response_tx, self.response_rx = channel()
        self.worker = AiWorker(provider, request_rx, response_tx, config_error=config_error)
        self.thread = threading.Thread(target=self.worker.run, name="test-ai-worker", daemon=True)

    def __enter__(self) -> "WorkerHarness":
        self.thread.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.request_tx.close()
        self.thread.join(timeout=2)

    def send(self, request) -> bool:
        return self.request_tx.send(request)

    def until_terminal(self, request_id: int) -> list:
        """Collect responses up to the Complete/Error/Cancelled for ``request_id``."""

        return drain(
            self.response_rx,
            until=lambda item: isinstance(item, (Complete, Error, Cancelled)) and item.request_id == request_id,
        )
