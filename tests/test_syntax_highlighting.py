"""Tests for rule-driven highlighting and themes."""

import pytest

from ScribePyside.widgets.code_editor.languages import APPLESCRIPT, BASH, JAVASCRIPT, PLAIN, SWIFT
from ScribePyside.widgets.code_editor.syntax_highlighting import (
    DARK,
    LIGHT,
    NOTEPAD_PLUS_PLUS,
    HighlightSpan,
    flatten_spans,
    get_theme,
    highlight,
    should_highlight_async,
)


def _roles(spans, role):
    return [(s.start, s.length) for s in spans if s.role == role]


class TestHighlight:
    def test_base_span_comes_first(self):
        spans = highlight("let a = 1", SWIFT)
        assert spans[0] == HighlightSpan(0, 9, LIGHT.text, "text", ("monospace", 14))
        assert all(span.font is None for span in spans[1:])

    def test_swift_line_comment_covers_whole_line(self):
        text = "// hello world"
        runs = flatten_spans(highlight(text, SWIFT))
        assert runs == [HighlightSpan(0, len(text), LIGHT.comment, "comment")]

    @pytest.mark.parametrize("language", [PLAIN, "cobol", None])
    def test_unknown_language_gets_only_base_span(self, language):
        spans = highlight("let x = 1", language)
        assert len(spans) == 1
        assert spans[0].role == "text"

    def test_empty_matches_are_skipped(self):
        for span in highlight("\n\n", SWIFT):
            assert span.length > 0 or span.role == "text"

    def test_last_applied_wins(self):
        runs = flatten_spans(highlight('let s = "Hello"', SWIFT))
        assert [(r.start, r.length, r.role) for r in runs] == [
            (0, 3, "keyword"),
            (3, 5, "text"),
            (8, 1, "string"),
            (9, 5, "type"),
            (14, 1, "string"),
        ]

    def test_bash_variables_and_paths(self):
        spans = highlight("cd /usr/local/bin && echo $HOME", BASH)
        assert (3, 14) in _roles(spans, "path")
        assert (26, 5) in _roles(spans, "variable")
        assert _roles(highlight("x=a/b", BASH), "path") == []

    def test_javascript_regex_literal(self):
        spans = highlight("const r = /ab+c/gi;", JAVASCRIPT)
        assert _roles(spans, "regex") == [(10, 8)]
        assert _roles(highlight("a // b", JAVASCRIPT), "regex") == []

    def test_applescript_keywords_ignore_case(self):
        spans = highlight('TELL application "Finder"', APPLESCRIPT)
        assert (0, 4) in _roles(spans, "keyword")

    def test_theme_colors_are_used(self):
        spans = highlight("// x", SWIFT, DARK)
        assert spans[0].color == DARK.text
        assert spans[1].color == DARK.comment


class TestFlattenSpans:
    def test_empty(self):
        assert flatten_spans([]) == []

    def test_gaps_are_left_uncolored(self):
        runs = flatten_spans([HighlightSpan(2, 2, "#111111", "keyword")])
        assert runs == [HighlightSpan(2, 2, "#111111", "keyword")]

    def test_runs_do_not_overlap(self):
        runs = flatten_spans(highlight("func a() { return \"B\" } // c", SWIFT))
        for prev, cur in zip(runs, runs[1:]):
            assert prev.end <= cur.start


class TestThemes:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("light", LIGHT),
            ("DARK", DARK),
            ("notepad++", NOTEPAD_PLUS_PLUS),
            ("notepad", NOTEPAD_PLUS_PLUS),
            ("default", LIGHT),
            ("solarized", LIGHT),
            (None, LIGHT),
        ],
    )
    def test_get_theme(self, name, expected):
        assert get_theme(name) is expected

    def test_unknown_role_uses_text_color(self):
        assert DARK.color_for("bogus") == DARK.text
        assert NOTEPAD_PLUS_PLUS.color_for("comment") == "#008000"


def test_async_threshold():
    assert should_highlight_async("x" * 5000)
    assert not should_highlight_async("x" * 4999)
    assert should_highlight_async("", threshold=0)
