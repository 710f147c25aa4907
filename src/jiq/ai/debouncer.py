"""Quiet-period detection for bursts of query edits."""

from __future__ import annotations

import time

__all__ = ["Debouncer", "DEFAULT_DEBOUNCE_MS", "monotonic_ms"]

DEFAULT_DEBOUNCE_MS = 1_000


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class Debouncer:
    """Fires once ``delay_ms`` has elapsed since the most recent :meth:`reset`.

    Timestamps are integer milliseconds; callers may pass their own clock
    readings, otherwise :func:`monotonic_ms` is used.
    """

    def __init__(self, delay_ms: int = DEFAULT_DEBOUNCE_MS) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._delay_ms = int(delay_ms)
        self._last_reset_ms: int | None = None

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def is_pending(self) -> bool:
        return self._last_reset_ms is not None

    def reset(self, now_ms: int | None = None) -> None:
        """Record an input change, postponing readiness by a full delay."""

        self._last_reset_ms = monotonic_ms() if now_ms is None else now_ms

    def ready(self, now_ms: int | None = None) -> bool:
        if self._last_reset_ms is None:
            return False
        now = monotonic_ms() if now_ms is None else now_ms
        return now - self._last_reset_ms >= self._delay_ms

    def cancel(self) -> None:
        """Forget the pending reset (used after the debounced action fired)."""

        self._last_reset_ms = None
