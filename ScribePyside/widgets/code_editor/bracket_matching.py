"""Delimiter pair matching for cursor emphasis in CodeEditor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .languages import BRACKET_PAIRS

NO_POSITION = -1


@dataclass(frozen=True, slots=True)
class BracketMatch:
    open_pos: int
    close_pos: int
    open_char: str
    close_char: str
    matched: bool

    def positions(self) -> list[int]:
        return [pos for pos in (self.open_pos, self.close_pos) if pos != NO_POSITION]


def _closers(pairs: Mapping[str, str]) -> dict[str, str]:
    return {close: open_ for open_, close in pairs.items() if open_ != close}


def _scan_forward(text: str, position: int, open_ch: str, close_ch: str) -> int:
    depth = 0
    for idx in range(position, len(text)):
        ch = text[idx]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return idx
    return NO_POSITION


def _scan_backward(text: str, position: int, open_ch: str, close_ch: str) -> int:
    depth = 0
    for idx in range(position, -1, -1):
        ch = text[idx]
        if ch == close_ch:
            depth += 1
        elif ch == open_ch:
            depth -= 1
            if depth == 0:
                return idx
    return NO_POSITION


def match_at(
    text: str,
    position: int,
    pairs: Mapping[str, str] = BRACKET_PAIRS,
) -> BracketMatch | None:
    """Match the delimiter at ``position``; ``None`` when it is not a recognized one.

    Quotes and backticks have no direction of their own, so they are always
    treated as openers and paired with the next occurrence of the same char.
    """
    source = str(text or "")
    try:
        pos = int(position)
    except (TypeError, ValueError):
        return None
    if pos < 0 or pos >= len(source):
        return None

    ch = source[pos]
    close_ch = pairs.get(ch)
    if close_ch is not None:
        if close_ch == ch:
            found = source.find(ch, pos + 1)
            close_pos = found if found >= 0 else NO_POSITION
        else:
            close_pos = _scan_forward(source, pos, ch, close_ch)
        return BracketMatch(pos, close_pos, ch, close_ch, close_pos != NO_POSITION)

    open_ch = _closers(pairs).get(ch)
    if open_ch is None:
        return None
    open_pos = _scan_backward(source, pos, open_ch, ch)
    return BracketMatch(open_pos, pos, open_ch, ch, open_pos != NO_POSITION)


def nearest_bracket(
    text: str,
    cursor_offset: int,
    pairs: Mapping[str, str] = BRACKET_PAIRS,
) -> BracketMatch | None:
    try:
        offset = int(cursor_offset)
    except (TypeError, ValueError):
        return None
    for candidate in (offset - 1, offset):
        result = match_at(text, candidate, pairs)
        if result is not None:
            return result
    return None


def match_bracket(text: str, cursor_offset: int) -> BracketMatch | None:
    return nearest_bracket(text, cursor_offset)


__all__ = [
    "NO_POSITION",
    "BracketMatch",
    "match_at",
    "nearest_bracket",
    "match_bracket",
]
