"""Language-id resolution helpers for editor documents.

Maps filenames, extensions and shebang lines to the ids understood by the
language rule registry.
"""

from __future__ import annotations

import re
from pathlib import Path

from ScribePyside.widgets.code_editor.languages import EXT_TO_LANG, LANGUAGES, PLAINTEXT_ID

_FILENAME_LANGUAGE_IDS: dict[str, str] = {
    ".bashrc": "bash",
    ".bash_profile": "bash",
    ".profile": "bash",
    ".zshrc": "bash",
}

_SHEBANG_RE = re.compile(r"^#!\s*(?P<path>\S+)(?:\s+(?P<arg>\S+))?")

_INTERPRETER_LANGUAGE_IDS: dict[str, str] = {
    "sh": "bash",
    "bash": "bash",
    "zsh": "bash",
    "python": "python",
    "python3": "python",
    "node": "javascript",
    "osascript": "applescript",
    "swift": "swift",
}


def _normalize_default(default: str | None) -> str:
    value = str(default or PLAINTEXT_ID).strip().lower()
    return value if value in LANGUAGES else PLAINTEXT_ID


def language_id_for_path(file_path: str | None, *, default: str = PLAINTEXT_ID) -> str:
    """Return a normalized language id for a file path."""
    path_text = str(file_path or "").strip()
    if not path_text:
        return _normalize_default(default)

    name = Path(path_text).name.lower()
    if name in _FILENAME_LANGUAGE_IDS:
        return _FILENAME_LANGUAGE_IDS[name]

    suffix = Path(path_text).suffix.lower()
    if suffix in EXT_TO_LANG:
        return EXT_TO_LANG[suffix]

    return _normalize_default(default)


def language_id_for_shebang(first_line: str | None) -> str | None:
    match = _SHEBANG_RE.match(str(first_line or "").strip())
    if match is None:
        return None
    interpreter = Path(match.group("path")).name.lower()
    if interpreter == "env" and match.group("arg"):
        interpreter = Path(match.group("arg")).name.lower()
    interpreter = re.sub(r"[\d.]+$", "", interpreter) or interpreter
    return _INTERPRETER_LANGUAGE_IDS.get(interpreter)


def language_id_for_document(file_path: str | None, text: str | None = None) -> str:
    """Resolve by path first; fall back to the shebang of extensionless files."""
    by_path = language_id_for_path(file_path)
    if by_path != PLAINTEXT_ID:
        return by_path
    first_line = str(text or "").split("\n", 1)[0]
    return language_id_for_shebang(first_line) or PLAINTEXT_ID


__all__ = [
    "language_id_for_path",
    "language_id_for_shebang",
    "language_id_for_document",
]
