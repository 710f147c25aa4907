"""Closable single-producer/single-consumer channels for the AI worker.

``queue.SimpleQueue`` has no notion of a disconnected peer, so each channel
pairs the queue with close flags. Closing the sender enqueues a sentinel that
the receiver turns into :class:`ChannelClosed` once everything sent before it
has been drained; closing the receiver makes further sends report failure.
"""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Generic, TypeVar

__all__ = ["ChannelClosed", "Sender", "Receiver", "channel"]

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by the receiving side once the sender is gone and the queue is drained."""


@dataclass(slots=True)
class _ChannelState:
    items: queue.SimpleQueue = field(default_factory=queue.SimpleQueue)
    sender_closed: bool = False
    receiver_closed: bool = False


class Sender(Generic[T]):
    """Producing endpoint."""

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.sender_closed or self._state.receiver_closed

    def send(self, item: T) -> bool:
        """Enqueue ``item``; returns False when either side has been closed."""

        if self.closed:
            return False
        self._state.items.put(item)
        return True

    def close(self) -> None:
        if self._state.sender_closed:
            return
        self._state.sender_closed = True
        self._state.items.put(_CLOSED)


class Receiver(Generic[T]):
    """Consuming endpoint."""

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.receiver_closed

    def recv(self, timeout: float | None = None) -> T:
        """Block until an item arrives.

        Raises ``queue.Empty`` on timeout and :class:`ChannelClosed` once the
        sender has been closed and every earlier item was consumed.
        """

        item = self._state.items.get(timeout=timeout)
        return self._unwrap(item)

    def try_recv(self) -> T:
        """Return the next item without blocking (``queue.Empty`` when none)."""

        item = self._state.items.get_nowait()
        return self._unwrap(item)

    def close(self) -> None:
        self._state.receiver_closed = True

    def _unwrap(self, item: object) -> T:
        if item is _CLOSED:
            # keep the sentinel so every later call also observes the closure
            self._state.items.put(_CLOSED)
            raise ChannelClosed()
        return item  # type: ignore[return-value]


def channel() -> tuple[Sender[T], Receiver[T]]:
    """Create a connected ``(sender, receiver)`` pair."""

    state = _ChannelState()
    return Sender(state), Receiver(state)
