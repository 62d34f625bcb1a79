"""Tests for the event emitter."""

import logging

from speedometer.events import EventEmitter


def test_handlers_called_in_order():
    emitter = EventEmitter()
    calls = []
    emitter.on("x", lambda v: calls.append(("a", v)))
    emitter.on("x", lambda v: calls.append(("b", v)))
    assert emitter.emit("x", 1) is True
    assert calls == [("a", 1), ("b", 1)]


def test_emit_without_listeners():
    assert EventEmitter().emit("nobody") is False


def test_off_removes_handler():
    emitter = EventEmitter()
    calls = []
    handler = emitter.on("x", calls.append)
    emitter.off("x", handler)
    emitter.off("x", handler)
    emitter.emit("x", 1)
    assert calls == []
    assert emitter.listener_count("x") == 0


def test_failing_handler_is_logged_and_skipped(caplog):
    emitter = EventEmitter()
    calls = []

    def boom(_):
        raise ValueError("bad handler")

    emitter.on("x", boom)
    emitter.on("x", calls.append)
    with caplog.at_level(logging.ERROR):
        emitter.emit("x", 7)
    assert calls == [7]
    assert "bad handler" in caplog.text


def test_handler_may_unsubscribe_during_emit():
    emitter = EventEmitter()
    calls = []

    def once(v):
        calls.append(v)
        emitter.off("x", once)

    emitter.on("x", once)
    emitter.emit("x", 1)
    emitter.emit("x", 2)
    assert calls == [1]
