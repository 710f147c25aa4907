"""Tests for the execution-result trigger flow and the debounced send."""

from __future__ import annotations

import queue

import pytest

from jiq.ai.events import Err, Ok, handle_execution_result, poll_response_channel, tick
from jiq.ai.messages import Cancel, Chunk, Complete, Query
from jiq.ai.state import AiState

INPUT = '{"users": [{"name": "a", "active": true}]}'


def test_changed_query_arms_debouncer_with_prompt(connected_state) -> None:
    state, request_rx, _ = connected_state

    scheduled = handle_execution_result(state, Err("syntax error"), ".users[", 7, INPUT, now_ms=0)

    assert scheduled
    assert state.pending_prompt is not None
    assert "syntax error" in state.pending_prompt
    assert "Cursor position: 7" in state.pending_prompt
    with pytest.raises(queue.Empty):
        request_rx.try_recv()


def test_unchanged_query_is_ignored(connected_state) -> None:
    state, _, _ = connected_state
    handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=0)
    tick(state, now_ms=1_000)
    state.append_chunk("kept")

    assert handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=2_000) is False
    assert state.response == "kept"


def test_tick_waits_for_debounce_then_sends(connected_state) -> None:
    state, request_rx, _ = connected_state
    handle_execution_result(state, Ok("[1]"), ".users", 6, INPUT, now_ms=0)

    assert tick(state, now_ms=299) is False
    assert tick(state, now_ms=300) is True

    request = request_rx.try_recv()
    assert isinstance(request, Query)
    assert request.request_id == 1
    assert "optimize" in request.prompt
    assert state.pending_prompt is None
    assert state.loading
    assert tick(state, now_ms=10_000) is False


def test_rapid_edits_send_only_last_query(connected_state) -> None:
    state, request_rx, _ = connected_state
    for stamp, query in ((0, ".u"), (100, ".us"), (250, ".users")):
        handle_execution_result(state, Ok("null"), query, len(query), INPUT, now_ms=stamp)
        assert tick(state, now_ms=stamp) is False

    assert tick(state, now_ms=549) is False
    assert tick(state, now_ms=550) is True

    request = request_rx.try_recv()
    assert ".users" in request.prompt
    with pytest.raises(queue.Empty):
        request_rx.try_recv()


def test_query_change_cancels_in_flight_and_clears_stale_answer(connected_state) -> None:
    state, request_rx, response_tx = connected_state
    handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=0)
    tick(state, now_ms=1_000)
    request_rx.try_recv()
    response_tx.send(Chunk("partial", 1))
    poll_response_channel(state)
    assert state.response == "partial"

    handle_execution_result(state, Err("boom"), ".a |", 4, INPUT, now_ms=1_100)

    assert request_rx.try_recv() == Cancel(1)
    assert state.response == ""
    assert not state.loading


def test_answer_queued_for_cancelled_query_does_not_come_back(connected_state) -> None:
    state, request_rx, response_tx = connected_state
    handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=0)
    tick(state, now_ms=1_000)
    request_rx.try_recv()
    response_tx.send(Chunk("1. [Fix] .old\n   advice for the old query", 1))
    response_tx.send(Complete(1))

    handle_execution_result(state, Err("boom"), ".b", 2, INPUT, now_ms=1_100)
    poll_response_channel(state)

    assert state.response == ""
    assert state.suggestions == []
    assert not state.loading
    assert state.pending_prompt is not None


def test_hidden_popup_does_not_schedule(connected_state) -> None:
    state, request_rx, _ = connected_state
    state.close()

    assert handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=0) is False
    assert state.pending_prompt is None
    assert tick(state, now_ms=5_000) is False
    with pytest.raises(queue.Empty):
        request_rx.try_recv()


def test_disabled_assistant_still_tracks_query_hash() -> None:
    state = AiState(enabled=False)

    handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=0)

    assert not state.is_query_changed(".a")
    assert state.pending_prompt is None


def test_tick_without_worker_drops_prompt() -> None:
    state = AiState(enabled=True, debounce_ms=0)
    handle_execution_result(state, Ok("1"), ".a", 2, INPUT, now_ms=0)

    assert tick(state, now_ms=0) is False
    assert state.pending_prompt is None
    assert not state.loading
