"""Rule-driven syntax highlighting, themes and the debounced highlight scheduler for CodeEditor."""

from __future__ import annotations

import bisect
import concurrent.futures
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QColor, QSyntaxHighlighter, QTextCharFormat, QTextDocument

from .helpers import _utf16_offsets
from .languages import Language, coerce_language, compile_pattern

logger = logging.getLogger(__name__)

DEFAULT_ASYNC_THRESHOLD_CHARS = 5000
DEFAULT_DEBOUNCE_MS = 100
_FUTURE_PUMP_INTERVAL_MS = 24

ROLE_TEXT = "text"
THEME_ROLES = (
    "text",
    "keyword",
    "string",
    "comment",
    "number",
    "variable",
    "path",
    "function",
    "type",
    "annotation",
    "regex",
)


@dataclass(frozen=True, slots=True)
class SyntaxTheme:
    name: str
    font_family: str = "monospace"
    font_size: int = 14
    text: str = "#000000"
    keyword: str = "#8500AB"
    string: str = "#006B00"
    comment: str = "#404040"
    number: str = "#0000AB"
    variable: str = "#AB3800"
    path: str = "#00598F"
    function: str = "#AB4700"
    type: str = "#00738F"
    annotation: str = "#3873AB"
    regex: str = "#C70059"

    def color_for(self, role: str) -> str:
        if role in THEME_ROLES:
            return getattr(self, role)
        return self.text


LIGHT = SyntaxTheme(name="light")

DARK = SyntaxTheme(
    name="dark",
    text="#FFFFFF",
    keyword="#F282ED",
    string="#ABD161",
    comment="#808080",
    number="#61A1E3",
    variable="#FCB561",
    path="#6EE3FA",
    function="#FFD961",
    type="#6EE3FA",
    annotation="#82EDDE",
    regex="#FC82C2",
)

NOTEPAD_PLUS_PLUS = SyntaxTheme(
    name="notepad++",
    text="#000000",
    keyword="#0000CC",
    string="#CC0000",
    comment="#008000",
    number="#800080",
    variable="#000000",
    path="#0000CC",
    function="#000000",
    type="#800080",
)

THEMES: Mapping[str, SyntaxTheme] = {
    LIGHT.name: LIGHT,
    DARK.name: DARK,
    NOTEPAD_PLUS_PLUS.name: NOTEPAD_PLUS_PLUS,
}

_THEME_ALIASES = {
    "default": "light",
    "notepadplusplus": "notepad++",
    "notepad": "notepad++",
}


def get_theme(name: str | None) -> SyntaxTheme:
    key = str(name or "").strip().lower()
    key = _THEME_ALIASES.get(key, key)
    return THEMES.get(key, LIGHT)


@dataclass(frozen=True, slots=True)
class HighlightSpan:
    start: int
    length: int
    color: str
    role: str
    font: tuple[str, int] | None = None

    @property
    def end(self) -> int:
        return self.start + self.length


def highlight(
    text: str,
    language: Language | str | None,
    theme: SyntaxTheme | None = None,
) -> list[HighlightSpan]:
    """Return the base span followed by one span per rule match, in rule order.

    Later spans win where they overlap earlier ones, so a capitalized word in a
    Swift string literal ends up with the type color.
    """
    source = str(text or "")
    lang = coerce_language(language)
    active = theme or LIGHT

    spans = [
        HighlightSpan(
            0,
            len(source),
            active.text,
            ROLE_TEXT,
            (active.font_family, int(active.font_size)),
        )
    ]
    for rule in lang.highlight_rules:
        pattern = compile_pattern(rule.pattern, rule.flags | lang.pattern_flags)
        if pattern is None:
            continue
        color = active.color_for(rule.role)
        for match in pattern.finditer(source):
            start, end = match.span()
            if end > start:
                spans.append(HighlightSpan(start, end - start, color, rule.role))
    return spans


def flatten_spans(spans: Iterable[HighlightSpan]) -> list[HighlightSpan]:
    """Resolve layered spans into non-overlapping runs (last applied wins)."""
    ordered = list(spans)
    if not ordered:
        return []
    size = max(span.end for span in ordered)
    owner = [-1] * size
    for idx, span in enumerate(ordered):
        if span.length > 0:
            owner[span.start:span.end] = [idx] * span.length

    runs: list[HighlightSpan] = []
    run_start = 0
    for pos in range(1, size + 1):
        if pos < size and owner[pos] == owner[run_start]:
            continue
        idx = owner[run_start]
        if idx >= 0:
            span = ordered[idx]
            runs.append(HighlightSpan(run_start, pos - run_start, span.color, span.role))
        run_start = pos
    return runs


def should_highlight_async(text: str, threshold: int = DEFAULT_ASYNC_THRESHOLD_CHARS) -> bool:
    return len(text or "") >= max(0, int(threshold))


class HighlightScheduler(QObject):
    """Coalesce highlight requests so only the latest text snapshot is applied.

    Small texts are highlighted inline. Large ones wait for a quiet period and
    then run on a single worker thread; a result is delivered only if nothing
    was scheduled after it.
    """

    spansReady = Signal(int, object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        threshold_chars: int = DEFAULT_ASYNC_THRESHOLD_CHARS,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        super().__init__(parent)
        self._threshold_chars = max(0, int(threshold_chars))
        self._request_seq = 0
        self._latest_token = 0
        self._latest_text = ""
        self._pending: tuple[int, str, Language, SyntaxTheme | None] | None = None
        self._futures: dict[int, tuple[concurrent.futures.Future, str]] = {}
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="scribe-highlight",
        )
        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.setInterval(max(0, int(debounce_ms)))
        self._debounce_timer.timeout.connect(self._start_pending)
        self._future_pump = QTimer(self)
        self._future_pump.setInterval(_FUTURE_PUMP_INTERVAL_MS)
        self._future_pump.timeout.connect(self._drain_futures)

    def threshold_chars(self) -> int:
        return self._threshold_chars

    def set_threshold_chars(self, value: int) -> None:
        self._threshold_chars = max(0, int(value))

    def debounce_ms(self) -> int:
        return self._debounce_timer.interval()

    def set_debounce_ms(self, value: int) -> None:
        self._debounce_timer.setInterval(max(0, int(value)))

    def latest_token(self) -> int:
        return self._latest_token

    def is_busy(self) -> bool:
        return self._pending is not None or bool(self._futures)

    def schedule(
        self,
        text: str,
        language: Language | str | None,
        theme: SyntaxTheme | None = None,
    ) -> int:
        source = str(text or "")
        lang = coerce_language(language)
        self._request_seq += 1
        token = self._request_seq
        self._latest_token = token
        self._latest_text = source
        self._pending = None

        if not should_highlight_async(source, self._threshold_chars):
            self._debounce_timer.stop()
            self.spansReady.emit(token, highlight(source, lang, theme))
            return token

        self._pending = (token, source, lang, theme)
        self._debounce_timer.start()
        return token

    def cancel(self, token: int) -> None:
        if self._pending is not None and self._pending[0] == token:
            self._pending = None
            self._debounce_timer.stop()
        entry = self._futures.get(token)
        if entry is not None:
            entry[0].cancel()
        if token == self._latest_token:
            self._latest_token = 0

    def _start_pending(self):
        if self._pending is None:
            return
        token, source, lang, theme = self._pending
        self._pending = None
        try:
            fut = self._executor.submit(highlight, source, lang, theme)
        except RuntimeError:
            logger.warning("Highlight worker is shut down; dropping request %s", token)
            return
        self._futures[token] = (fut, source)
        if not self._future_pump.isActive():
            self._future_pump.start()

    def _drain_futures(self):
        if not self._futures:
            self._future_pump.stop()
            return
        done_tokens = [token for token, (fut, _) in self._futures.items() if fut.done()]
        for token in done_tokens:
            fut, snapshot = self._futures.pop(token)
            if fut.cancelled():
                continue
            try:
                spans = fut.result()
            except Exception:
                logger.exception("Background highlight %s failed", token)
                continue
            if token != self._latest_token or snapshot != self._latest_text:
                logger.debug("Discarding stale highlight %s (latest %s)", token, self._latest_token)
                continue
            self.spansReady.emit(token, spans)

        if not self._futures:
            self._future_pump.stop()

    def shutdown(self) -> None:
        self._debounce_timer.stop()
        self._future_pump.stop()
        self._pending = None
        for fut, _ in self._futures.values():
            fut.cancel()
        self._futures.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)


class SpanHighlighter(QSyntaxHighlighter):
    """Paints precomputed span runs onto the blocks of a document.

    Spans index the plain text by code point. Runs are kept in document
    positions (UTF-16 code units), which is what Qt blocks and formats use.
    """

    def __init__(self, parent: QTextDocument | None = None):
        super().__init__(parent)
        self._runs: list[HighlightSpan] = []
        self._run_starts: list[int] = []
        self._formats: dict[str, QTextCharFormat] = {}

    def runs(self) -> list[HighlightSpan]:
        return list(self._runs)

    def set_spans(self, spans: Iterable[HighlightSpan], text: str | None = None) -> None:
        source = self.document().toPlainText() if text is None else str(text)
        runs = flatten_spans(spans)
        offsets = _utf16_offsets(source)
        if offsets is not None:
            last = len(offsets) - 1
            converted = []
            for run in runs:
                start = offsets[min(run.start, last)]
                end = offsets[min(run.end, last)]
                if end > start:
                    converted.append(replace(run, start=start, length=end - start))
            runs = converted
        self._runs = runs
        self._run_starts = [run.start for run in self._runs]
        self.rehighlight()

    def clear_spans(self) -> None:
        self._runs = []
        self._run_starts = []
        self.rehighlight()

    def _format_for(self, color: str) -> QTextCharFormat:
        fmt = self._formats.get(color)
        if fmt is None:
            fmt = QTextCharFormat()
            fmt.setForeground(QColor(color))
            self._formats[color] = fmt
        return fmt

    def highlightBlock(self, text: str):
        if not self._runs:
            return
        block = self.currentBlock()
        block_start = block.position()
        block_end = block_start + max(0, block.length() - 1)
        idx = max(0, bisect.bisect_right(self._run_starts, block_start) - 1)
        while idx < len(self._runs):
            run = self._runs[idx]
            if run.start >= block_end:
                break
            start = max(run.start, block_start)
            end = min(run.end, block_end)
            if end > start:
                self.setFormat(start - block_start, end - start, self._format_for(run.color))
            idx += 1


__all__ = [
    "DEFAULT_ASYNC_THRESHOLD_CHARS",
    "DEFAULT_DEBOUNCE_MS",
    "THEME_ROLES",
    "SyntaxTheme",
    "LIGHT",
    "DARK",
    "NOTEPAD_PLUS_PLUS",
    "THEMES",
    "get_theme",
    "HighlightSpan",
    "highlight",
    "flatten_spans",
    "should_highlight_async",
    "HighlightScheduler",
    "SpanHighlighter",
]
