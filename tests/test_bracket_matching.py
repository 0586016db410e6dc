"""Tests for delimiter pair matching."""

import pytest

from ScribePyside.widgets.code_editor.bracket_matching import (
    NO_POSITION,
    BracketMatch,
    match_at,
    match_bracket,
    nearest_bracket,
)


class TestMatchAt:
    """Matching from a known delimiter position."""

    def test_forward_match_from_opener(self):
        result = match_at("foo(bar(1), 2)", 3)
        assert result == BracketMatch(3, 13, "(", ")", True)

    def test_backward_match_from_closer(self):
        result = match_at("foo(bar(1), 2)", 13)
        assert result == BracketMatch(3, 13, "(", ")", True)

    @pytest.mark.parametrize(
        "text",
        [
            "{ a: [1, (2)], b: <T> }",
            "func f() {\n  if x { y() }\n}",
            "(((a)(b))c)",
        ],
    )
    def test_opener_and_closer_agree(self, text):
        for pos, ch in enumerate(text):
            if ch not in "([{<":
                continue
            forward = match_at(text, pos)
            assert forward.matched
            backward = match_at(text, forward.close_pos)
            assert (backward.open_pos, backward.close_pos) == (forward.open_pos, forward.close_pos)
            assert backward.matched

    def test_unterminated_opener(self):
        result = match_at("(a(b)c", 0)
        assert result.matched is False
        assert result.open_pos == 0
        assert result.close_pos == NO_POSITION

    def test_unmatched_closer(self):
        result = match_at("a)b", 1)
        assert result == BracketMatch(NO_POSITION, 1, "(", ")", False)

    def test_quotes_scan_forward_without_depth(self):
        text = 'say "hi" and "bye"'
        assert match_at(text, 4) == BracketMatch(4, 7, '"', '"', True)
        # A quote is always an opener, so the closing quote of "hi" pairs forward.
        assert match_at(text, 7) == BracketMatch(7, 13, '"', '"', True)

    def test_lone_backtick(self):
        result = match_at("`abc", 0)
        assert result == BracketMatch(0, NO_POSITION, "`", "`", False)

    @pytest.mark.parametrize("position", [-1, 3, 100])
    def test_out_of_range(self, position):
        assert match_at("abc", position) is None

    def test_not_a_delimiter(self):
        assert match_at("abc", 1) is None

    def test_invariant_exactly_one_side_when_unmatched(self):
        for text in ("((", "))", "'", "<<>"):
            for pos in range(len(text)):
                result = match_at(text, pos)
                if result is None or result.matched:
                    continue
                assert (result.open_pos == NO_POSITION) != (result.close_pos == NO_POSITION)


class TestNearestBracket:
    """Cursor-based lookup."""

    def test_prefers_character_before_cursor(self):
        text = "()[]"
        result = nearest_bracket(text, 2)
        assert (result.open_pos, result.close_pos) == (0, 1)

    def test_falls_back_to_character_at_cursor(self):
        text = "x (y)"
        result = nearest_bracket(text, 2)
        assert (result.open_pos, result.close_pos) == (2, 4)

    def test_nothing_nearby(self):
        assert nearest_bracket("abc def", 4) is None

    def test_cursor_at_end_of_text(self):
        result = match_bracket("f(x)", 4)
        assert (result.open_pos, result.close_pos) == (1, 3)

    def test_empty_text(self):
        assert match_bracket("", 0) is None

    def test_positions_helper(self):
        assert match_bracket("(", 1).positions() == [0]
