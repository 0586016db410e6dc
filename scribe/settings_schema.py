from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict


EDITOR_THEMES = (
    "light",
    "dark",
    "notepad++",
)


class EditorEngineSettings(TypedDict, total=False):
    tab_width: int
    highlight_async_threshold_chars: int
    highlight_debounce_ms: int
    fold_refresh_ms: int
    alignment_window_lines: int
    theme: str
    font_family: str
    font_size: int
    bracket_matching: bool
    code_folding: bool


def default_editor_settings() -> EditorEngineSettings:
    return {
        "tab_width": 4,
        "highlight_async_threshold_chars": 5000,
        "highlight_debounce_ms": 100,
        "fold_refresh_ms": 140,
        "alignment_window_lines": 10,
        "theme": "light",
        "font_family": "monospace",
        "font_size": 14,
        "bracket_matching": True,
        "code_folding": True,
    }


def normalize_editor_settings(raw: Any) -> EditorEngineSettings:
    defaults = default_editor_settings()
    data = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            data[str(key)] = value

    theme = str(data.get("theme", defaults["theme"]) or defaults["theme"]).strip().lower()
    if theme not in EDITOR_THEMES:
        theme = defaults["theme"]

    def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
        try:
            return max(low, min(high, int(value)))
        except Exception:
            return fallback

    def _flag(value: Any, fallback: bool) -> bool:
        if isinstance(value, str):
            text = value.strip().lower()
            if text in {"1", "true", "yes", "on"}:
                return True
            if text in {"0", "false", "no", "off", ""}:
                return False
            return fallback
        return bool(value)

    return {
        "tab_width": _clamp_int(data.get("tab_width"), 1, 16, int(defaults["tab_width"])),
        "highlight_async_threshold_chars": _clamp_int(
            data.get("highlight_async_threshold_chars"), 0, 10_000_000, int(defaults["highlight_async_threshold_chars"])
        ),
        "highlight_debounce_ms": _clamp_int(data.get("highlight_debounce_ms"), 0, 5000, int(defaults["highlight_debounce_ms"])),
        "fold_refresh_ms": _clamp_int(data.get("fold_refresh_ms"), 0, 5000, int(defaults["fold_refresh_ms"])),
        "alignment_window_lines": _clamp_int(data.get("alignment_window_lines"), 0, 1000, int(defaults["alignment_window_lines"])),
        "theme": theme,
        "font_family": str(data.get("font_family", defaults["font_family"]) or "").strip() or defaults["font_family"],
        "font_size": _clamp_int(data.get("font_size"), 6, 96, int(defaults["font_size"])),
        "bracket_matching": _flag(data.get("bracket_matching", defaults["bracket_matching"]), defaults["bracket_matching"]),
        "code_folding": _flag(data.get("code_folding", defaults["code_folding"]), defaults["code_folding"]),
    }


@dataclass(slots=True)
class NormalizedEditorConfig:
    tab_width: int
    highlight_async_threshold_chars: int
    highlight_debounce_ms: int
    fold_refresh_ms: int
    alignment_window_lines: int
    theme: str
    font_family: str
    font_size: int
    bracket_matching: bool
    code_folding: bool

    @classmethod
    def from_mapping(cls, data: Any) -> "NormalizedEditorConfig":
        n = normalize_editor_settings(data)
        return cls(
            tab_width=int(n["tab_width"]),
            highlight_async_threshold_chars=int(n["highlight_async_threshold_chars"]),
            highlight_debounce_ms=int(n["highlight_debounce_ms"]),
            fold_refresh_ms=int(n["fold_refresh_ms"]),
            alignment_window_lines=int(n["alignment_window_lines"]),
            theme=str(n["theme"]),
            font_family=str(n["font_family"]),
            font_size=int(n["font_size"]),
            bracket_matching=bool(n["bracket_matching"]),
            code_folding=bool(n["code_folding"]),
        )

    def as_dict(self) -> EditorEngineSettings:
        return {
            "tab_width": self.tab_width,
            "highlight_async_threshold_chars": self.highlight_async_threshold_chars,
            "highlight_debounce_ms": self.highlight_debounce_ms,
            "fold_refresh_ms": self.fold_refresh_ms,
            "alignment_window_lines": self.alignment_window_lines,
            "theme": self.theme,
            "font_family": self.font_family,
            "font_size": self.font_size,
            "bracket_matching": self.bracket_matching,
            "code_folding": self.code_folding,
        }
