"""Tests for the GUI-free editor document."""

from ScribePyside.widgets.code_editor.languages import BASH, PLAIN, PYTHON, SWIFT
from ScribePyside.widgets.code_editor.syntax_highlighting import DARK
from scribe.document import EditorDocument
from scribe.settings_schema import NormalizedEditorConfig


class TestEditorDocument:
    def test_language_follows_path(self):
        doc = EditorDocument.from_path("main.swift", "func f() {\n}")
        assert doc.language is SWIFT
        assert doc.set_file_path("tool.py") is PYTHON
        assert doc.set_file_path(None) is PLAIN

    def test_shebang_for_extensionless_file(self):
        doc = EditorDocument(text="#!/bin/bash\necho hi\n", file_path="deploy")
        assert doc.language is BASH

    def test_explicit_language_is_kept(self):
        doc = EditorDocument(text="x", file_path="a.py", language=BASH)
        assert doc.language is BASH
        assert doc.set_language("swift") is SWIFT

    def test_fold_flags_survive_edits(self):
        doc = EditorDocument.from_path("main.swift", "func foo() {\n  return 1\n}")
        region = doc.detect_folds()[0]
        assert doc.toggle_fold(region) is True
        doc.set_text("func foo() {\n  return 2\n}")
        assert doc.detect_folds()[0].folded is True

    def test_fold_state_round_trip(self):
        doc = EditorDocument()
        doc.set_folded("4:class", True)
        saved = doc.fold_state()
        other = EditorDocument()
        other.restore_fold_state(saved)
        assert other.is_folded("4:class")
        other.restore_fold_state({"1:block": False})
        assert other.fold_state() == {}

    def test_newline_indent_uses_config(self):
        config = NormalizedEditorConfig.from_mapping({"alignment_window_lines": 0})
        doc = EditorDocument(text="let x = foo(a,\n", language=SWIFT, config=config)
        assert doc.newline_indent(len(doc.text)) == ""

    def test_reindent_updates_text(self):
        doc = EditorDocument(text="if x:\ny = 1", language=PYTHON)
        assert doc.reindent() == "if x:\n    y = 1"
        assert doc.text == "if x:\n    y = 1"

    def test_match_bracket(self):
        doc = EditorDocument(text="f(x)")
        assert doc.match_bracket(2).open_pos == 1

    def test_highlight_uses_configured_theme(self):
        config = NormalizedEditorConfig.from_mapping({"theme": "dark"})
        doc = EditorDocument(text="// x", language=SWIFT, config=config)
        assert doc.highlight()[0].color == DARK.text
