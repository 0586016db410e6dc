"""Newline indentation and block reindent for CodeEditor."""

from __future__ import annotations

from .languages import IndentRuleSet, Language, any_pattern_matches, coerce_language

DEFAULT_TAB_WIDTH = 4
DEFAULT_ALIGNMENT_WINDOW = 10

_ALIGN_OPENERS = {"(": ")", "[": "]"}
_ALIGN_CLOSERS = {")": "(", "]": "["}


def leading_whitespace(line: str) -> str:
    i = 0
    while i < len(line) and line[i] in (" ", "\t"):
        i += 1
    return line[:i]


def indent_columns(line: str, tab_width: int = DEFAULT_TAB_WIDTH) -> int:
    # tabs measured as tab_width columns
    width = max(1, int(tab_width or DEFAULT_TAB_WIDTH))
    cols = 0
    for ch in str(line or ""):
        if ch == " ":
            cols += 1
        elif ch == "\t":
            cols += width
        else:
            break
    return cols


def make_indent(columns: int, rules: IndentRuleSet, tab_width: int = DEFAULT_TAB_WIDTH) -> str:
    cols = max(0, int(columns))
    if rules.use_spaces:
        return " " * cols
    width = max(1, int(tab_width or DEFAULT_TAB_WIDTH))
    return "\t" * (cols // width) + " " * (cols % width)


def _open_paren_position(content: str) -> int | None:
    """Position of the first unclosed ``(``/``[`` if the line leaves one open on its own."""
    net = {opener: 0 for opener in _ALIGN_OPENERS}
    opened: list[int] = []
    for pos, ch in enumerate(content):
        if ch in _ALIGN_OPENERS:
            net[ch] += 1
            opened.append(pos)
        elif ch in _ALIGN_CLOSERS:
            net[_ALIGN_CLOSERS[ch]] -= 1
            if opened:
                opened.pop()
    if opened and any(count > 0 for count in net.values()):
        return opened[0]
    return None


def _alignment_columns(lines: list[str], row: int, tab_width: int, window: int) -> int | None:
    # each line is judged alone; closers on later lines do not cancel it
    stop = max(-1, row - 1 - max(0, int(window)))
    for idx in range(row - 1, stop, -1):
        line = lines[idx]
        pos = _open_paren_position(line.lstrip(" \t"))
        if pos is not None:
            return indent_columns(line, tab_width) + pos + 1
    return None


def compute_newline_indent(
    text: str,
    offset: int,
    language: Language | str | None,
    *,
    tab_width: int = DEFAULT_TAB_WIDTH,
    alignment_window: int = DEFAULT_ALIGNMENT_WINDOW,
) -> str:
    """Return the indentation for the line holding ``offset``.

    The line holding ``offset`` is the freshly started line; its predecessor
    drives the decision. The first line of a text never gets indentation.
    """
    source = str(text or "")
    lang = coerce_language(language)
    rules = lang.indent_rules
    flags = lang.pattern_flags
    try:
        pos = int(offset)
    except (TypeError, ValueError):
        pos = len(source)
    pos = min(max(0, pos), len(source))

    lines = source.split("\n")
    row = source.count("\n", 0, pos)
    if row <= 0:
        return ""

    current = lines[row]
    predecessor = lines[row - 1]
    base = indent_columns(predecessor, tab_width)

    if any_pattern_matches(rules.decrease_before, current.strip(), flags):
        return make_indent(max(0, base - rules.indent_size), rules, tab_width)

    if any_pattern_matches(rules.increase_after, predecessor, flags):
        return make_indent(base + rules.indent_size, rules, tab_width)

    if rules.align_with_opening:
        aligned = _alignment_columns(lines, row, tab_width, alignment_window)
        if aligned is not None:
            return make_indent(aligned, rules, tab_width)

    return leading_whitespace(predecessor)


def reindent_block(
    text: str,
    language: Language | str | None,
    *,
    tab_width: int = DEFAULT_TAB_WIDTH,
) -> str:
    source = str(text or "")
    lang = coerce_language(language)
    rules = lang.indent_rules
    flags = lang.pattern_flags
    if not rules.increase_after and not rules.decrease_before:
        # Nothing to derive levels from; keep the author's indentation.
        return source

    out: list[str] = []
    level = 0
    for line in source.split("\n"):
        content = line.lstrip(" \t")
        if not content.strip():
            out.append(line)
            continue
        if any_pattern_matches(rules.decrease_before, content, flags):
            level = max(0, level - 1)
        out.append(make_indent(level * rules.indent_size, rules, tab_width) + content)
        if any_pattern_matches(rules.increase_after, line, flags):
            level += 1
    return "\n".join(out)


__all__ = [
    "DEFAULT_TAB_WIDTH",
    "DEFAULT_ALIGNMENT_WINDOW",
    "leading_whitespace",
    "indent_columns",
    "make_indent",
    "compute_newline_indent",
    "reindent_block",
]
