"""Unit tests for RegistrationEntry creation and initialization."""

from __future__ import annotations

import logging

import pytest

from autoreg_core import EntryState, RegistrationEntry


class Widget:
    def __init__(self) -> None:
        self.started = 0


def test_create_is_lazy_and_cached() -> None:
    calls = []

    def creator() -> Widget:
        calls.append(1)
        return Widget()

    entry = RegistrationEntry("widget", creator)
    assert calls == []
    assert entry.state is EntryState.EMPTY

    first = entry.create()
    assert entry.create() is first
    assert len(calls) == 1
    assert entry.state is EntryState.BUILT


def test_create_failure_leaves_entry_empty_and_retries(caplog: pytest.LogCaptureFixture) -> None:
    attempts = {"count": 0}

    def flaky() -> Widget:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise RuntimeError("boom")
        return Widget()

    entry = RegistrationEntry("flaky", flaky)
    with caplog.at_level(logging.WARNING, logger="autoreg_core"):
        assert entry.create() is None
    assert "create failed for 'flaky'" in caplog.text
    assert entry.state is EntryState.EMPTY

    assert isinstance(entry.create(), Widget)
    assert attempts["count"] == 2


def test_creator_returning_none_counts_as_failure(caplog: pytest.LogCaptureFixture) -> None:
    entry = RegistrationEntry("nothing", lambda: None)
    with caplog.at_level(logging.WARNING, logger="autoreg_core"):
        assert entry.create() is None
    assert "returned no instance" in caplog.text
    assert entry.instance is None


def test_init_runs_initializer_once() -> None:
    def start(widget: Widget) -> None:
        widget.started += 1

    entry = RegistrationEntry("widget", Widget, start)
    entry.init()
    entry.init()
    assert entry.initialized
    assert entry.instance.started == 1
    assert entry.state is EntryState.INITIALIZED


def test_init_without_initializer_marks_initialized() -> None:
    entry = RegistrationEntry("plain", Widget)
    entry.init()
    assert entry.initialized
    assert isinstance(entry.instance, Widget)


def test_initializer_failure_keeps_instance_and_allows_retry() -> None:
    attempts = {"count": 0}

    def start(widget: Widget) -> None:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise ValueError("not yet")
        widget.started += 1

    entry = RegistrationEntry("retry", Widget, start)
    entry.init()
    built = entry.instance
    assert built is not None
    assert not entry.initialized
    assert entry.state is EntryState.BUILT

    entry.init()
    assert entry.initialized
    assert entry.instance is built
    assert built.started == 1


def test_init_skips_initializer_when_creation_fails() -> None:
    called = []

    def boom() -> Widget:
        raise RuntimeError("no")

    entry = RegistrationEntry("broken", boom, called.append)
    entry.init()
    assert called == []
    assert not entry.initialized


def test_priority_is_clamped_and_orders_entries() -> None:
    low = RegistrationEntry("low", Widget, priority=-3)
    high = RegistrationEntry("high", Widget, priority=42)
    assert low.priority == 0
    assert high.priority == 10
    assert low < high
    assert not high < low
    assert sorted([high, low]) == [low, high]


def test_info_mentions_key_priority_and_state() -> None:
    entry = RegistrationEntry("svc", Widget, priority=2)
    assert entry.info() == "svc (priority=2, state=empty)"


def test_non_callable_creator_is_rejected() -> None:
    with pytest.raises(TypeError):
        RegistrationEntry("bad", "not callable")  # type: ignore[arg-type]
