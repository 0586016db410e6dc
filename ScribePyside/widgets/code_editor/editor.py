from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Mapping, MutableMapping

from PySide6.QtCore import QPoint, QRect, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QFont, QPainter, QPalette, QPolygon, QTextCursor, QTextFormat
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit

from scribe.settings_schema import default_editor_settings, normalize_editor_settings

from .bracket_matching import BracketMatch, NO_POSITION, match_bracket
from .code_folding import FoldableRegion, is_folded, toggle_fold, update_folding
from .components import LineNumberArea
from .helpers import _qt_to_text_offset, _text_to_qt_offset, _theme_chrome
from .indentation import compute_newline_indent, leading_whitespace, reindent_block
from .languages import PLAIN, Language, coerce_language, language_for_path
from .syntax_highlighting import HighlightScheduler, HighlightSpan, SpanHighlighter, SyntaxTheme, get_theme


class CodeEditor(QPlainTextEdit):
    """Plain-text code editor wired to the language-aware analyzers.

    Fold flags are not owned here: the host hands in its mapping with
    :meth:`set_fold_flags` and the editor only reads and toggles entries.
    """

    languageChanged = Signal(str)
    foldToggled = Signal(str, bool)

    def __init__(
        self,
        parent=None,
        *,
        settings: Mapping[str, object] | None = None,
        fold_flags: MutableMapping[str, bool] | None = None,
    ):
        super().__init__(parent)
        self._file_path: str | None = None
        self._language: Language = PLAIN
        self._cfg: dict[str, object] = dict(default_editor_settings())
        self._theme: SyntaxTheme = get_theme("light")
        self._fold_flags: MutableMapping[str, bool] = fold_flags if fold_flags is not None else {}
        self._fold_regions: list[FoldableRegion] = []
        self._fold_markers: dict[int, FoldableRegion] = {}
        self._fold_gutter_width = 14
        self._fold_text: str | None = None
        self._bracket_match: BracketMatch | None = None
        self._bracket_selections: list[QTextEdit.ExtraSelection] = []
        self._last_highlight_text: str | None = None

        self.lineNumberArea = LineNumberArea(self)
        self._highlighter = SpanHighlighter(self.document())
        self._highlight_scheduler = HighlightScheduler(self)
        self._highlight_scheduler.spansReady.connect(self._on_spans_ready)

        self._fold_refresh_timer = QTimer(self)
        self._fold_refresh_timer.setSingleShot(True)
        self._fold_refresh_timer.setInterval(140)
        self._fold_refresh_timer.timeout.connect(self._refresh_fold_regions)

        self.setLineWrapMode(QPlainTextEdit.NoWrap)
        self.blockCountChanged.connect(self.updateLineNumberAreaWidth)
        self.updateRequest.connect(self.updateLineNumberArea)
        self.cursorPositionChanged.connect(self._refresh_bracket_match)
        self.textChanged.connect(self._schedule_fold_refresh)
        self.textChanged.connect(self._schedule_highlight)

        self.apply_editor_settings(settings or {})
        self.updateLineNumberAreaWidth(0)

    # ---------- language / file ----------
    @property
    def file_path(self) -> str | None:
        return self._file_path

    def set_file_path(self, path: str | Path | None) -> None:
        self._file_path = str(path) if path else None
        self.set_language(language_for_path(self._file_path))

    def language(self) -> Language:
        return self._language

    def language_id(self) -> str:
        return self._language.id

    def set_language(self, language: Language | str | None) -> None:
        lang = coerce_language(language)
        if lang is self._language:
            return
        self._language = lang
        self._clear_folding()
        self._last_highlight_text = None
        self.languageChanged.emit(lang.id)
        self._schedule_fold_refresh(immediate=True)
        self._schedule_highlight()

    # ---------- settings ----------
    def tab_width(self) -> int:
        return int(self._cfg["tab_width"])

    def theme(self) -> SyntaxTheme:
        return self._theme

    def code_folding_enabled(self) -> bool:
        return bool(self._cfg["code_folding"])

    def bracket_matching_enabled(self) -> bool:
        return bool(self._cfg["bracket_matching"])

    def editor_settings(self) -> dict[str, object]:
        return dict(self._cfg)

    def apply_editor_settings(self, cfg: Mapping[str, object]) -> None:
        raw = cfg if isinstance(cfg, Mapping) else {}
        merged = normalize_editor_settings({**self._cfg, **dict(raw)})
        self._cfg = dict(merged)

        self._theme = replace(
            get_theme(str(merged["theme"])),
            font_family=str(merged["font_family"]),
            font_size=int(merged["font_size"]),
        )
        self._apply_theme()

        self._highlight_scheduler.set_threshold_chars(int(merged["highlight_async_threshold_chars"]))
        self._highlight_scheduler.set_debounce_ms(int(merged["highlight_debounce_ms"]))
        self._fold_refresh_timer.setInterval(int(merged["fold_refresh_ms"]))

        self._last_highlight_text = None
        self._schedule_highlight()
        if self.code_folding_enabled():
            self._schedule_fold_refresh(immediate=True)
        else:
            self._clear_folding()
        self._refresh_bracket_match()
        self.updateLineNumberAreaWidth(0)

    def _apply_theme(self) -> None:
        font = QFont(self._theme.font_family, int(self._theme.font_size))
        font.setStyleHint(QFont.Monospace)
        font.setFixedPitch(True)
        self.setFont(font)
        self.setTabStopDistance(self.fontMetrics().horizontalAdvance(" ") * self.tab_width())

        chrome = _theme_chrome(self._theme.name)
        palette = self.palette()
        palette.setColor(QPalette.Base, QColor(chrome["background"]))
        palette.setColor(QPalette.Text, QColor(self._theme.text))
        self.setPalette(palette)

    # ---------- highlighting ----------
    def highlighter(self) -> SpanHighlighter:
        return self._highlighter

    def highlight_scheduler(self) -> HighlightScheduler:
        return self._highlight_scheduler

    def _schedule_highlight(self):
        text = self.toPlainText()
        if text == self._last_highlight_text:
            return
        self._last_highlight_text = text
        self._highlight_scheduler.schedule(text, self._language, self._theme)

    def _on_spans_ready(self, token: int, spans: list[HighlightSpan]):
        if token != self._highlight_scheduler.latest_token():
            return
        self._highlighter.set_spans(spans, self._last_highlight_text)

    def shutdown(self) -> None:
        self._fold_refresh_timer.stop()
        self._highlight_scheduler.shutdown()

    # ---------- folding ----------
    def fold_flags(self) -> MutableMapping[str, bool]:
        return self._fold_flags

    def set_fold_flags(self, flags: MutableMapping[str, bool] | None) -> None:
        self._fold_flags = flags if flags is not None else {}
        self._schedule_fold_refresh(immediate=True)

    def fold_regions(self) -> list[FoldableRegion]:
        return list(self._fold_regions)

    def fold_region_at_line(self, line: int) -> FoldableRegion | None:
        return self._fold_markers.get(int(line) - 1)

    def toggle_fold_at_line(self, line: int) -> bool:
        region = self.fold_region_at_line(line)
        if region is None:
            return False
        folded = toggle_fold(self._fold_flags, region.key)
        self.foldToggled.emit(region.key, folded)
        self._refresh_fold_regions()
        return True

    def is_line_folded(self, line: int) -> bool:
        region = self.fold_region_at_line(line)
        return region is not None and is_folded(self._fold_flags, region.key)

    def _schedule_fold_refresh(self, immediate: bool = False):
        if not self.code_folding_enabled():
            return
        if immediate:
            self._fold_refresh_timer.stop()
            self._refresh_fold_regions()
            return
        if self.toPlainText() == self._fold_text:
            return
        self._fold_refresh_timer.start()

    def _refresh_fold_regions(self):
        self._fold_text = self.toPlainText()
        update_folding(self)

    def _clear_folding(self):
        self._fold_refresh_timer.stop()
        self._fold_text = None
        self._fold_regions = []
        self._fold_markers = {}
        self._set_all_blocks_visible()
        self._refresh_fold_layout()

    def _set_all_blocks_visible(self):
        block = self.document().firstBlock()
        while block.isValid():
            block.setVisible(True)
            block.setLineCount(1)
            block = block.next()

    def _apply_fold_visibility(self):
        self._set_all_blocks_visible()
        for start_block, region in sorted(self._fold_markers.items()):
            if not region.folded:
                continue
            end_block = region.end_line - 1
            block = self.document().findBlockByNumber(start_block).next()
            while block.isValid() and block.blockNumber() <= end_block:
                block.setVisible(False)
                block.setLineCount(0)
                block = block.next()
        self._refresh_fold_layout()

    def _refresh_fold_layout(self):
        doc = self.document()
        doc.markContentsDirty(0, max(0, doc.characterCount()))
        self.viewport().update()
        self.lineNumberArea.update()
        self._apply_viewport_margins()

    def _fold_marker_rect(self, top: int, line_height: int) -> QRect:
        marker_size = max(8, min(11, int(line_height) - 3))
        y = int(top + max(0, (line_height - marker_size) // 2))
        return QRect(2, y, marker_size, marker_size)

    def _block_number_at_y(self, y_pos: int) -> int:
        block = self.firstVisibleBlock()
        top = self.blockBoundingGeometry(block).translated(self.contentOffset()).top()
        bottom = top + self.blockBoundingRect(block).height()
        while block.isValid() and top <= y_pos:
            if block.isVisible() and bottom >= y_pos:
                return int(block.blockNumber())
            block = block.next()
            top = bottom
            bottom = top + self.blockBoundingRect(block).height()
        return -1

    # ---------- brackets ----------
    def bracket_match(self) -> BracketMatch | None:
        return self._bracket_match

    def _refresh_bracket_match(self):
        self._bracket_match = None
        self._bracket_selections = []
        if self.bracket_matching_enabled():
            text = self.toPlainText()
            result = match_bracket(text, _qt_to_text_offset(text, self.textCursor().position()))
            self._bracket_match = result
            if result is not None:
                chrome = _theme_chrome(self._theme.name)
                color = QColor(chrome["bracket_match" if result.matched else "bracket_unmatched"])
                for pos in (result.open_pos, result.close_pos):
                    if pos == NO_POSITION:
                        continue
                    selection = QTextEdit.ExtraSelection()
                    selection.format.setBackground(color)
                    cursor = QTextCursor(self.document())
                    cursor.setPosition(_text_to_qt_offset(text, pos))
                    cursor.movePosition(QTextCursor.NextCharacter, QTextCursor.KeepAnchor)
                    selection.cursor = cursor
                    self._bracket_selections.append(selection)
        self._rebuild_extra_selections()

    def _rebuild_extra_selections(self):
        selections: list[QTextEdit.ExtraSelection] = []
        if not self.isReadOnly():
            line = QTextEdit.ExtraSelection()
            line.format.setBackground(QColor(_theme_chrome(self._theme.name)["current_line"]))
            line.format.setProperty(QTextFormat.FullWidthSelection, True)
            line.cursor = self.textCursor()
            line.cursor.clearSelection()
            selections.append(line)
        selections.extend(self._bracket_selections)
        self.setExtraSelections(selections)

    # ---------- indentation ----------
    def keyPressEvent(self, event):
        key = event.key()
        mods = event.modifiers()
        if key in (Qt.Key_Return, Qt.Key_Enter) and not (
            mods & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier)
        ):
            self._insert_newline_with_indent()
            event.accept()
            return
        super().keyPressEvent(event)

    def _insert_newline_with_indent(self):
        cursor = self.textCursor()
        cursor.beginEditBlock()
        cursor.insertText("\n")
        text = self.toPlainText()
        indent = compute_newline_indent(
            text,
            _qt_to_text_offset(text, cursor.position()),
            self._language,
            tab_width=self.tab_width(),
            alignment_window=int(self._cfg["alignment_window_lines"]),
        )
        # Text carried down from the split line keeps its content, not its old indent.
        block_text = cursor.block().text()
        existing = leading_whitespace(block_text[_qt_to_text_offset(block_text, cursor.positionInBlock()):])
        if existing:
            cursor.movePosition(QTextCursor.Right, QTextCursor.KeepAnchor, len(existing))
        cursor.insertText(indent)
        cursor.endEditBlock()
        self.setTextCursor(cursor)
        self.ensureCursorVisible()

    def reindent_all(self) -> bool:
        text = self.toPlainText()
        updated = reindent_block(text, self._language, tab_width=self.tab_width())
        if updated == text:
            return False
        line = self.textCursor().blockNumber()
        cursor = QTextCursor(self.document())
        cursor.beginEditBlock()
        cursor.select(QTextCursor.Document)
        cursor.insertText(updated)
        cursor.endEditBlock()
        block = self.document().findBlockByNumber(min(line, self.blockCount() - 1))
        restore = QTextCursor(block)
        restore.movePosition(QTextCursor.EndOfBlock)
        self.setTextCursor(restore)
        return True

    # ---------- gutter ----------
    def lineNumberAreaWidth(self):
        digits = 1
        max_num = max(1, self.blockCount())
        while max_num >= 10:
            max_num //= 10
            digits += 1
        space = 3 + self.fontMetrics().horizontalAdvance("9") * digits
        if self.code_folding_enabled():
            space += int(self._fold_gutter_width)
        return space

    def updateLineNumberAreaWidth(self, _):
        self._apply_viewport_margins()

    def updateLineNumberArea(self, rect, dy):
        if dy:
            self.lineNumberArea.scroll(0, dy)
        else:
            self.lineNumberArea.update(0, rect.y(), self.lineNumberArea.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self.updateLineNumberAreaWidth(0)

    def _apply_viewport_margins(self):
        width = self.lineNumberAreaWidth()
        self.setViewportMargins(width, 0, 0, 0)
        cr = self.contentsRect()
        self.lineNumberArea.setGeometry(QRect(cr.left(), cr.top(), width, cr.height()))

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._apply_viewport_margins()

    def lineNumberAreaPaintEvent(self, event):
        painter = QPainter(self.lineNumberArea)
        gutter = QColor(_theme_chrome(self._theme.name)["background"])
        gutter = gutter.darker(125) if gutter.lightness() < 128 else gutter.darker(108)
        painter.fillRect(event.rect(), gutter)

        number_color = gutter.lighter(155) if gutter.lightness() < 128 else gutter.darker(155)
        number_left = int(self._fold_gutter_width) if self.code_folding_enabled() else 0
        line_height = self.fontMetrics().height()

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = self.blockBoundingGeometry(block).translated(self.contentOffset()).top()
        bottom = top + self.blockBoundingRect(block).height()

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                painter.setPen(number_color)
                painter.drawText(
                    number_left,
                    int(top),
                    max(0, self.lineNumberArea.width() - number_left - 2),
                    line_height,
                    Qt.AlignRight,
                    str(block_number + 1),
                )
                region = self._fold_markers.get(block_number)
                if region is not None:
                    marker = self._fold_marker_rect(int(top), line_height)
                    marker_color = QColor(number_color)
                    marker_color.setAlpha(220)
                    painter.setPen(Qt.NoPen)
                    painter.setBrush(marker_color)
                    if region.folded:
                        pts = [
                            QPoint(marker.left(), marker.top()),
                            QPoint(marker.left(), marker.bottom()),
                            QPoint(marker.right(), marker.center().y()),
                        ]
                    else:
                        pts = [
                            QPoint(marker.left(), marker.top()),
                            QPoint(marker.right(), marker.top()),
                            QPoint(marker.center().x(), marker.bottom()),
                        ]
                    painter.drawPolygon(QPolygon(pts))
            block = block.next()
            top = bottom
            bottom = top + self.blockBoundingRect(block).height()
            block_number += 1
        painter.end()

    def lineNumberAreaMousePressEvent(self, event):
        if event.button() != Qt.LeftButton or not self.code_folding_enabled():
            event.ignore()
            return
        point = event.position().toPoint() if hasattr(event, "position") else event.pos()
        if int(point.x()) > int(self._fold_gutter_width):
            event.ignore()
            return
        block_number = self._block_number_at_y(int(point.y()))
        if block_number < 0 or not self.toggle_fold_at_line(block_number + 1):
            event.ignore()
            return
        event.accept()

    def lineNumberAreaToolTip(self, point: QPoint) -> str:
        if int(point.x()) > int(self._fold_gutter_width):
            return ""
        region = self._fold_markers.get(self._block_number_at_y(int(point.y())))
        if region is None:
            return ""
        return f"{region.label} ({region.kind}, lines {region.start_line}-{region.end_line})"


__all__ = ["CodeEditor"]
