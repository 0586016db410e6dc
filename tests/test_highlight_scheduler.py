"""Tests for debounced, latest-wins highlight scheduling."""

import logging

import pytest

from ScribePyside.widgets.code_editor.languages import SWIFT
from ScribePyside.widgets.code_editor.syntax_highlighting import HighlightScheduler

BIG = "let value = 1\n" * 20


@pytest.fixture
def scheduler(qtbot):
    sched = HighlightScheduler(threshold_chars=100, debounce_ms=20)
    yield sched
    sched.shutdown()


@pytest.fixture
def received(scheduler):
    tokens = []
    scheduler.spansReady.connect(lambda token, spans: tokens.append(token))
    return tokens


class TestHighlightScheduler:
    def test_small_text_is_highlighted_inline(self, qtbot, scheduler):
        with qtbot.waitSignal(scheduler.spansReady, timeout=1000) as blocker:
            token = scheduler.schedule("let a = 1", SWIFT)
        assert blocker.args[0] == token
        assert blocker.args[1][0].length == 9
        assert not scheduler.is_busy()

    def test_large_text_runs_in_background(self, qtbot, scheduler):
        with qtbot.waitSignal(scheduler.spansReady, timeout=3000) as blocker:
            token = scheduler.schedule(BIG, SWIFT)
            assert scheduler.is_busy()
        assert blocker.args[0] == token
        assert blocker.args[1][0].length == len(BIG)

    def test_burst_delivers_only_latest(self, qtbot, scheduler, received):
        scheduler.schedule(BIG, SWIFT)
        scheduler.schedule(BIG + "a", SWIFT)
        last = scheduler.schedule(BIG + "ab", SWIFT)
        qtbot.waitUntil(lambda: bool(received), timeout=3000)
        qtbot.wait(100)
        assert received == [last]

    def test_stale_background_result_is_discarded(self, qtbot, scheduler, received):
        scheduler.schedule(BIG, SWIFT)
        scheduler._start_pending()
        latest = scheduler.schedule("short", SWIFT)
        qtbot.waitUntil(lambda: not scheduler.is_busy(), timeout=3000)
        assert received == [latest]

    def test_cancel(self, qtbot, scheduler, received):
        token = scheduler.schedule(BIG, SWIFT)
        scheduler.cancel(token)
        qtbot.wait(150)
        assert received == []
        assert scheduler.latest_token() == 0

    def test_tokens_increase(self, scheduler):
        first = scheduler.schedule("a", SWIFT)
        second = scheduler.schedule("b", SWIFT)
        assert second > first
        assert scheduler.latest_token() == second

    def test_settings_are_clamped(self, scheduler):
        scheduler.set_threshold_chars(-1)
        scheduler.set_debounce_ms(-10)
        assert scheduler.threshold_chars() == 0
        assert scheduler.debounce_ms() == 0

    def test_request_after_shutdown_is_dropped(self, scheduler, received, caplog):
        scheduler.shutdown()
        with caplog.at_level(logging.WARNING):
            scheduler.schedule(BIG, SWIFT)
            scheduler._start_pending()
        assert "shut down" in caplog.text
        assert received == []
