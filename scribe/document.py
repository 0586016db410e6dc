"""Editor document: text snapshot, resolved language and the fold-flag map it owns."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from ScribePyside.widgets.code_editor.bracket_matching import BracketMatch, match_bracket
from ScribePyside.widgets.code_editor.code_folding import (
    FoldableRegion,
    detect_folds_with_state,
    is_folded,
    set_folded,
    toggle_fold,
)
from ScribePyside.widgets.code_editor.indentation import compute_newline_indent, reindent_block
from ScribePyside.widgets.code_editor.languages import PLAIN, Language, get_language
from ScribePyside.widgets.code_editor.syntax_highlighting import HighlightSpan, SyntaxTheme, get_theme, highlight

from .services.language_id import language_id_for_document
from .settings_schema import NormalizedEditorConfig


@dataclass(slots=True)
class EditorDocument:
    text: str = ""
    file_path: str | None = None
    language: Language = PLAIN
    fold_flags: dict[str, bool] = field(default_factory=dict)
    config: NormalizedEditorConfig = field(default_factory=lambda: NormalizedEditorConfig.from_mapping({}))

    def __post_init__(self):
        if self.file_path and self.language is PLAIN:
            self.language = get_language(language_id_for_document(self.file_path, self.text))

    @classmethod
    def from_path(cls, path: str | Path, text: str = "", **kwargs) -> "EditorDocument":
        return cls(text=text, file_path=str(path), **kwargs)

    def set_text(self, text: str) -> None:
        self.text = str(text or "")

    def set_file_path(self, path: str | Path | None) -> Language:
        self.file_path = str(path) if path else None
        self.language = get_language(language_id_for_document(self.file_path, self.text))
        return self.language

    def set_language(self, language: Language | str | None) -> Language:
        self.language = language if isinstance(language, Language) else get_language(language)
        return self.language

    # ---------- folding ----------
    def detect_folds(self, *, prune: bool = False) -> list[FoldableRegion]:
        return detect_folds_with_state(
            self.text,
            self.language,
            self.fold_flags,
            tab_width=self.config.tab_width,
            prune=prune,
        )

    def toggle_fold(self, key: FoldableRegion | tuple[int, str] | str) -> bool:
        return toggle_fold(self.fold_flags, key)

    def set_folded(self, key: FoldableRegion | tuple[int, str] | str, folded: bool) -> None:
        set_folded(self.fold_flags, key, folded)

    def is_folded(self, key: FoldableRegion | tuple[int, str] | str) -> bool:
        return is_folded(self.fold_flags, key)

    def fold_state(self) -> dict[str, bool]:
        return {key: True for key, value in self.fold_flags.items() if value}

    def restore_fold_state(self, state: Mapping[str, object] | None) -> None:
        self.fold_flags.clear()
        for key, value in dict(state or {}).items():
            if value:
                self.fold_flags[str(key)] = True

    # ---------- transient analysis ----------
    def match_bracket(self, cursor_offset: int) -> BracketMatch | None:
        return match_bracket(self.text, cursor_offset)

    def newline_indent(self, offset: int) -> str:
        return compute_newline_indent(
            self.text,
            offset,
            self.language,
            tab_width=self.config.tab_width,
            alignment_window=self.config.alignment_window_lines,
        )

    def reindent(self) -> str:
        self.text = reindent_block(self.text, self.language, tab_width=self.config.tab_width)
        return self.text

    def highlight(self, theme: SyntaxTheme | None = None) -> list[HighlightSpan]:
        return highlight(self.text, self.language, theme or get_theme(self.config.theme))
