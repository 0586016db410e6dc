"""Tests for the language rule registry."""

import logging
import re

import pytest

from ScribePyside.widgets.code_editor.languages import (
    APPLESCRIPT,
    BASH,
    BRACKET_PAIRS,
    JAVASCRIPT,
    LANGUAGES,
    Language,
    PLAIN,
    PYTHON,
    SWIFT,
    coerce_language,
    compile_pattern,
    compiled_patterns,
    get_language,
    language_for_path,
    resolve,
)


class TestResolve:
    """Extension to language resolution."""

    @pytest.mark.parametrize(
        "extension, expected",
        [
            ("swift", SWIFT),
            (".py", PYTHON),
            ("PY", PYTHON),
            (".sh", BASH),
            ("bash", BASH),
            (".applescript", APPLESCRIPT),
            ("scpt", APPLESCRIPT),
            (".js", JAVASCRIPT),
            (".tsx", JAVASCRIPT),
        ],
    )
    def test_known_extensions(self, extension, expected):
        assert resolve(extension) is expected

    @pytest.mark.parametrize("extension", ["", None, ".txt", "docx", "."])
    def test_unknown_extension_is_plain(self, extension):
        assert resolve(extension) is PLAIN

    def test_plain_language_is_minimal(self):
        assert PLAIN.keywords == ()
        assert PLAIN.highlight_rules == ()
        assert PLAIN.indent_rules.increase_after == ()
        assert PLAIN.indent_rules.decrease_before == ()
        assert PLAIN.fold_brace_blocks is True

    def test_language_for_path(self):
        assert language_for_path("/tmp/project/Main.SWIFT") is SWIFT
        assert language_for_path("script") is PLAIN
        assert language_for_path(None) is PLAIN

    def test_get_language_by_id(self):
        assert get_language("python") is PYTHON
        assert get_language(" JavaScript ") is JAVASCRIPT
        assert get_language("cobol") is PLAIN

    def test_coerce_language_passes_instances_through(self):
        assert coerce_language(BASH) is BASH
        assert coerce_language("bash") is BASH
        assert coerce_language(None) is PLAIN


class TestRegistryData:
    """Static shape of the registry."""

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            LANGUAGES["ruby"] = PLAIN

    def test_exactly_seven_bracket_pairs(self):
        assert dict(BRACKET_PAIRS) == {
            "(": ")",
            "[": "]",
            "{": "}",
            "<": ">",
            '"': '"',
            "'": "'",
            "`": "`",
        }

    def test_indent_sizes(self):
        assert SWIFT.indent_rules.indent_size == 4
        assert PYTHON.indent_rules.indent_size == 4
        assert JAVASCRIPT.indent_rules.indent_size == 2
        assert BASH.indent_rules.indent_size == 2
        assert APPLESCRIPT.indent_rules.indent_size == 4

    def test_display_names_and_abbreviations(self):
        assert [(lang.display_name, lang.abbreviation) for lang in LANGUAGES.values()] == [
            ("Swift", "SWIFT"),
            ("Python", "PY"),
            ("JavaScript", "JS"),
            ("Bash", "SH"),
            ("AppleScript", "AS"),
            ("Plain Text", ""),
        ]

    def test_applescript_is_case_insensitive(self):
        assert APPLESCRIPT.pattern_flags & re.IGNORECASE
        assert not SWIFT.pattern_flags & re.IGNORECASE

    def test_every_builtin_pattern_compiles(self):
        for lang in LANGUAGES.values():
            for rule in lang.highlight_rules:
                assert compile_pattern(rule.pattern, rule.flags) is not None, rule
            for header in lang.fold_headers:
                assert compile_pattern(header.pattern, lang.pattern_flags) is not None, header


class TestPatternCompilation:
    """Broken patterns are dropped, never raised."""

    def test_broken_pattern_is_dropped_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            patterns = compiled_patterns((r"\d+", r"(unclosed", r"\w+"))
        assert [p.pattern for p in patterns] == [r"\d+", r"\w+"]
        assert "(unclosed" in caplog.text

    def test_broken_pattern_compiles_to_none(self):
        assert compile_pattern(r"[a-") is None


class TestLanguageInstances:
    """Languages built outside the registry."""

    def test_default_bracket_pairs_are_shared(self):
        custom = Language(id="ini", display_name="INI")
        assert custom.bracket_pairs is BRACKET_PAIRS
        assert custom.indent_rules.indent_size == 4

    def test_languages_are_hashable(self):
        custom = Language(id="ini", display_name="INI")
        assert len({SWIFT, PYTHON, custom}) == 3
        assert {SWIFT: "swift"}[SWIFT] == "swift"
