"""Tests for filename, extension and shebang language resolution."""

import pytest

from scribe.services.language_id import (
    language_id_for_document,
    language_id_for_path,
    language_id_for_shebang,
)


class TestLanguageIdForPath:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("src/App.swift", "swift"),
            ("tool.PY", "python"),
            ("/home/me/.bashrc", "bash"),
            ("deploy.sh", "bash"),
            ("Notes.applescript", "applescript"),
            ("index.mjs", "javascript"),
            ("README", "plaintext"),
            ("notes.txt", "plaintext"),
            ("", "plaintext"),
            (None, "plaintext"),
        ],
    )
    def test_paths(self, path, expected):
        assert language_id_for_path(path) == expected

    def test_default_is_validated(self):
        assert language_id_for_path("README", default="python") == "python"
        assert language_id_for_path("README", default="cobol") == "plaintext"


class TestShebang:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("#!/bin/bash", "bash"),
            ("#!/bin/sh -e", "bash"),
            ("#!/usr/bin/env python3", "python"),
            ("#!/usr/bin/python3.11", "python"),
            ("#! /usr/bin/env node", "javascript"),
            ("#!/usr/bin/osascript", "applescript"),
            ("#!/usr/bin/perl", None),
            ("print('hi')", None),
            (None, None),
        ],
    )
    def test_interpreters(self, line, expected):
        assert language_id_for_shebang(line) == expected

    def test_document_prefers_path(self):
        assert language_id_for_document("run.py", "#!/bin/bash\n") == "python"

    def test_document_falls_back_to_shebang(self):
        assert language_id_for_document("run", "#!/usr/bin/env bash\necho hi\n") == "bash"
        assert language_id_for_document("run", "echo hi\n") == "plaintext"
