"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

from jiq.ai.channel import channel
from jiq.ai.state import AiState


@pytest.fixture
def connected_state() -> tuple:
    """An enabled :class:`AiState` wired to bare channels with no worker behind them.

    Returns ``(state, request_rx, response_tx)`` so tests can play the worker.
    """

    state = AiState(enabled=True, configured=True, debounce_ms=300)
    request_tx, request_rx = channel()
    response_tx, response_rx = channel()
    state.set_channels(request_tx, response_rx)
    return state, request_rx, response_tx


@pytest.fixture(autouse=True)
def _reset_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
