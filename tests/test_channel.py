"""Tests for the closable worker channels."""

from __future__ import annotations

import queue
import threading

import pytest

from jiq.ai.channel import ChannelClosed, channel


def test_items_arrive_in_order() -> None:
    sender, receiver = channel()
    for item in ("a", "b", "c"):
        assert sender.send(item)

    assert [receiver.recv(timeout=1) for _ in range(3)] == ["a", "b", "c"]


def test_try_recv_raises_empty_when_nothing_waiting() -> None:
    _, receiver = channel()

    with pytest.raises(queue.Empty):
        receiver.try_recv()


def test_closed_sender_drains_then_reports_closure() -> None:
    sender, receiver = channel()
    sender.send(1)
    sender.close()

    assert receiver.try_recv() == 1
    with pytest.raises(ChannelClosed):
        receiver.try_recv()
    with pytest.raises(ChannelClosed):
        receiver.recv(timeout=1)
    assert sender.send(2) is False


def test_closing_receiver_fails_sends() -> None:
    sender, receiver = channel()
    receiver.close()

    assert sender.closed
    assert sender.send("x") is False


def test_close_is_idempotent() -> None:
    sender, receiver = channel()
    sender.close()
    sender.close()

    with pytest.raises(ChannelClosed):
        receiver.try_recv()
    with pytest.raises(ChannelClosed):
        receiver.try_recv()


def test_blocking_recv_wakes_on_close() -> None:
    sender, receiver = channel()
    outcome = []

    def consume() -> None:
        try:
            receiver.recv(timeout=2)
        except ChannelClosed:
            outcome.append("closed")

    thread = threading.Thread(target=consume)
    thread.start()
    sender.close()
    thread.join(timeout=2)

    assert outcome == ["closed"]
