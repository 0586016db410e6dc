from __future__ import annotations

# Background/current-line/bracket colors per theme name.
_THEME_CHROME: dict[str, dict[str, str]] = {
    "light": {
        "background": "#FFFFFF",
        "current_line": "#F2F4F8",
        "bracket_match": "#C8E1FF",
        "bracket_unmatched": "#FFC9C9",
    },
    "dark": {
        "background": "#1E1E1E",
        "current_line": "#2A2D2E",
        "bracket_match": "#264F78",
        "bracket_unmatched": "#6E2B2B",
    },
    "notepad++": {
        "background": "#FFFFFF",
        "current_line": "#E8E8FF",
        "bracket_match": "#8080FF",
        "bracket_unmatched": "#FF8080",
    },
}


def _theme_chrome(theme_name: str) -> dict[str, str]:
    return _THEME_CHROME.get(str(theme_name or "").strip().lower(), _THEME_CHROME["light"])


# Qt positions count UTF-16 code units; the analyzers index Python code points.
def _utf16_width(ch: str) -> int:
    return 2 if ord(ch) > 0xFFFF else 1


def _utf16_offsets(text: str) -> list[int] | None:
    """Cumulative UTF-16 offset per code point, or ``None`` when the two agree."""
    if text.isascii():
        return None
    offsets = [0]
    for ch in text:
        offsets.append(offsets[-1] + _utf16_width(ch))
    if offsets[-1] == len(text):
        return None
    return offsets


def _qt_to_text_offset(text: str, qt_pos: int) -> int:
    pos = max(0, int(qt_pos))
    if text.isascii():
        return min(pos, len(text))
    units = 0
    for idx, ch in enumerate(text):
        if units >= pos:
            return idx
        units += _utf16_width(ch)
    return len(text)


def _text_to_qt_offset(text: str, offset: int) -> int:
    pos = min(max(0, int(offset)), len(text))
    if text.isascii():
        return pos
    return pos + sum(1 for ch in text[:pos] if ord(ch) > 0xFFFF)


__all__: list[str] = []
