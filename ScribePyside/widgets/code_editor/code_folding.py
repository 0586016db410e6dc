"""Fold region detection, fold-flag bookkeeping and update helpers for CodeEditor."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Mapping, MutableMapping

from .indentation import DEFAULT_TAB_WIDTH, indent_columns
from .languages import (
    FOLD_STYLE_INDENTATION,
    FOLD_STYLE_KEYWORD,
    FoldHeaderRule,
    Language,
    coerce_language,
    compile_pattern,
)

if TYPE_CHECKING:
    from .editor import CodeEditor

REGION_KINDS = (
    "function",
    "class",
    "struct",
    "enum",
    "protocol",
    "extension",
    "block",
    "comment",
    "import",
    "conditional",
    "loop",
    "switch",
)


@dataclass(slots=True)
class FoldableRegion:
    start_line: int
    end_line: int
    start_column: int
    end_column: int
    kind: str
    label: str
    folded: bool = False

    @property
    def key(self) -> str:
        return fold_key(self.start_line, self.kind)

    @property
    def line_span(self) -> int:
        return self.end_line - self.start_line + 1


def fold_key(region: FoldableRegion | tuple[int, str] | int | str, kind: str | None = None) -> str:
    """Build the stable ``"<start_line>:<kind>"`` key for a region."""
    if isinstance(region, FoldableRegion):
        return f"{int(region.start_line)}:{region.kind}"
    if isinstance(region, tuple):
        start, kind = region
        return f"{int(start)}:{kind}"
    if kind is None:
        return str(region)
    return f"{int(region)}:{kind}"


def _as_key(value: FoldableRegion | tuple[int, str] | str) -> str:
    if isinstance(value, str):
        return value
    return fold_key(value)


def is_folded(flags: Mapping[str, bool] | None, key: FoldableRegion | tuple[int, str] | str) -> bool:
    if not flags:
        return False
    return bool(flags.get(_as_key(key), False))


def set_folded(
    flags: MutableMapping[str, bool],
    key: FoldableRegion | tuple[int, str] | str,
    folded: bool,
) -> None:
    k = _as_key(key)
    if folded:
        flags[k] = True
    else:
        flags.pop(k, None)


def toggle_fold(flags: MutableMapping[str, bool], key: FoldableRegion | tuple[int, str] | str) -> bool:
    new_state = not is_folded(flags, key)
    set_folded(flags, key, new_state)
    return new_state


def reconcile_fold_flags(
    regions: Iterable[FoldableRegion],
    flags: MutableMapping[str, bool] | None,
    *,
    prune: bool = False,
) -> list[FoldableRegion]:
    out = [replace(region, folded=is_folded(flags, region.key)) for region in regions]
    if prune and flags:
        live = {region.key for region in out}
        for stale in [k for k in flags if k not in live]:
            del flags[stale]
    return out


def _split_lines(text: str) -> list[str]:
    return [line[:-1] if line.endswith("\r") else line for line in str(text or "").split("\n")]


def _is_comment_line(stripped: str, lang: Language) -> bool:
    return bool(lang.line_comment) and stripped.startswith(lang.line_comment)


def _find_brace_end(lines: list[str], start_idx: int) -> int | None:
    depth = 0
    opened = False
    for idx in range(start_idx, len(lines)):
        for ch in lines[idx]:
            if ch == "{":
                depth += 1
                opened = True
            elif ch == "}":
                depth -= 1
                if opened and depth == 0:
                    return idx
    return None


def _find_indent_end(lines: list[str], start_idx: int, lang: Language, tab_width: int) -> int | None:
    base = indent_columns(lines[start_idx], tab_width)
    end: int | None = None
    for idx in range(start_idx + 1, len(lines)):
        stripped = lines[idx].strip()
        if not stripped or _is_comment_line(stripped, lang):
            continue
        if indent_columns(lines[idx], tab_width) <= base:
            break
        end = idx
    return end


def _ends_with_terminator(stripped: str, terminator: str) -> bool:
    if stripped == terminator:
        return True
    if not stripped.startswith(terminator):
        return False
    nxt = stripped[len(terminator)]
    return not (nxt.isalnum() or nxt == "_")


def _find_keyword_end(lines: list[str], start_idx: int, terminator: str, lang: Language) -> int | None:
    term = terminator.strip()
    if not term:
        return None
    if lang.case_insensitive:
        term = term.lower()
    for idx in range(start_idx + 1, len(lines)):
        stripped = lines[idx].strip()
        if lang.case_insensitive:
            stripped = stripped.lower()
        if _ends_with_terminator(stripped, term):
            return idx
    return None


def _terminator_for(rule: FoldHeaderRule, match: re.Match) -> str:
    terminator = rule.terminator
    if "{name}" in terminator:
        terminator = terminator.replace("{name}", match.groupdict().get("name") or "")
    return terminator


def _region(lines: list[str], start_idx: int, end_idx: int, kind: str, label: str) -> FoldableRegion:
    start_line = lines[start_idx]
    return FoldableRegion(
        start_line=start_idx + 1,
        end_line=end_idx + 1,
        start_column=len(start_line) - len(start_line.lstrip()),
        end_column=len(lines[end_idx]),
        kind=kind,
        label=label,
    )


def _import_regions(lines: list[str], lang: Language) -> list[FoldableRegion]:
    prefixes = tuple(lang.import_prefixes)
    if not prefixes:
        return []
    regions: list[FoldableRegion] = []
    run_start: int | None = None
    run_end = -1

    def flush() -> None:
        if run_start is not None and run_end > run_start:
            regions.append(_region(lines, run_start, run_end, "import", "imports"))

    for idx, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(prefixes):
            if run_start is None:
                run_start = idx
            run_end = idx
        elif not stripped:
            continue
        else:
            flush()
            run_start = None
            run_end = -1
    flush()
    return regions


def _header_regions(lines: list[str], lang: Language, tab_width: int) -> list[FoldableRegion]:
    rules: list[tuple[FoldHeaderRule, re.Pattern]] = []
    for rule in lang.fold_headers:
        pattern = compile_pattern(rule.pattern, lang.pattern_flags)
        if pattern is not None:
            rules.append((rule, pattern))
    if not rules:
        return []

    regions: list[FoldableRegion] = []
    for idx, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or _is_comment_line(stripped, lang):
            continue
        for rule, pattern in rules:
            match = pattern.match(line)
            if match is None:
                continue
            end: int | None
            if rule.finder == FOLD_STYLE_INDENTATION:
                end = _find_indent_end(lines, idx, lang, tab_width)
            elif rule.finder == FOLD_STYLE_KEYWORD:
                end = _find_keyword_end(lines, idx, _terminator_for(rule, match), lang)
            else:
                end = _find_brace_end(lines, idx)
            if end is not None and end > idx:
                label = rule.label or match.group(0).strip()
                regions.append(_region(lines, idx, end, rule.kind, label))
            break
    return regions


def _comment_regions(lines: list[str], lang: Language) -> list[FoldableRegion]:
    regions: list[FoldableRegion] = []
    for rule in lang.block_comments:
        start_pattern = compile_pattern(rule.start, lang.pattern_flags)
        end_pattern = compile_pattern(rule.end, lang.pattern_flags)
        if start_pattern is None or end_pattern is None:
            continue
        idx = 0
        while idx < len(lines):
            line = lines[idx]
            match = start_pattern.search(line)
            if match is None or _is_comment_line(line.strip(), lang):
                idx += 1
                continue
            if end_pattern.search(line, match.end()) is not None:
                idx += 1
                continue
            end_idx = next(
                (j for j in range(idx + 1, len(lines)) if end_pattern.search(lines[j])),
                None,
            )
            if end_idx is None:
                idx += 1
                continue
            regions.append(_region(lines, idx, end_idx, "comment", line.strip()))
            idx = end_idx + 1
    return regions


def _brace_block_regions(lines: list[str], taken_starts: set[int]) -> list[FoldableRegion]:
    regions: list[FoldableRegion] = []
    for idx, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.endswith("{") or (idx + 1) in taken_starts:
            continue
        end = _find_brace_end(lines, idx)
        if end is not None and end > idx:
            regions.append(_region(lines, idx, end, "block", stripped))
    return regions


def detect_folds(
    text: str,
    language: Language | str | None,
    *,
    tab_width: int = DEFAULT_TAB_WIDTH,
) -> list[FoldableRegion]:
    """Detect foldable regions, sorted by start line.

    Regions may nest or overlap. Unterminated blocks produce no region.
    """
    lang = coerce_language(language)
    lines = _split_lines(text)

    regions = _import_regions(lines, lang)
    headers = _header_regions(lines, lang, tab_width)
    regions.extend(headers)
    regions.extend(_comment_regions(lines, lang))
    if lang.fold_brace_blocks:
        regions.extend(_brace_block_regions(lines, {r.start_line for r in headers}))

    regions.sort(key=lambda region: region.start_line)
    return regions


def detect_folds_with_state(
    text: str,
    language: Language | str | None,
    flags: MutableMapping[str, bool] | None,
    *,
    tab_width: int = DEFAULT_TAB_WIDTH,
    prune: bool = False,
) -> list[FoldableRegion]:
    return reconcile_fold_flags(detect_folds(text, language, tab_width=tab_width), flags, prune=prune)


def regions_by_start_line(regions: Iterable[FoldableRegion]) -> dict[int, FoldableRegion]:
    """Keep one region per start line (the widest) for a single gutter marker per line."""
    out: dict[int, FoldableRegion] = {}
    for region in regions:
        prev = out.get(region.start_line)
        if prev is None or region.end_line > prev.end_line:
            out[region.start_line] = region
    return out


def update_folding(editor: "CodeEditor") -> None:
    if not editor.code_folding_enabled():
        editor._clear_folding()
        editor.updateLineNumberAreaWidth(0)
        editor.lineNumberArea.update()
        return

    regions = detect_folds_with_state(
        editor.toPlainText(),
        editor.language(),
        editor.fold_flags(),
        tab_width=editor.tab_width(),
    )
    editor._fold_regions = regions
    editor._fold_markers = {
        start_line - 1: region for start_line, region in regions_by_start_line(regions).items()
    }
    editor._apply_fold_visibility()


__all__ = [
    "REGION_KINDS",
    "FoldableRegion",
    "fold_key",
    "is_folded",
    "set_folded",
    "toggle_fold",
    "reconcile_fold_flags",
    "detect_folds",
    "detect_folds_with_state",
    "regions_by_start_line",
    "update_folding",
]
