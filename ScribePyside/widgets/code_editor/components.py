from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QSize
from PySide6.QtWidgets import QToolTip, QWidget

if TYPE_CHECKING:
    from .editor import CodeEditor


class LineNumberArea(QWidget):
    """Gutter with line numbers and fold triangles; painting and clicks go to the editor."""

    def __init__(self, editor: "CodeEditor"):
        super().__init__(editor)
        self.codeEditor = editor
        self.setMouseTracking(True)

    def sizeHint(self):
        return QSize(self.codeEditor.lineNumberAreaWidth(), 0)

    def paintEvent(self, event):
        self.codeEditor.lineNumberAreaPaintEvent(event)

    def mousePressEvent(self, event):
        self.codeEditor.lineNumberAreaMousePressEvent(event)

    def mouseMoveEvent(self, event):
        point = event.position().toPoint() if hasattr(event, "position") else event.pos()
        label = self.codeEditor.lineNumberAreaToolTip(point)
        if label:
            QToolTip.showText(self.mapToGlobal(point), label, self)
        else:
            QToolTip.hideText()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event):
        QToolTip.hideText()
        super().leaveEvent(event)


__all__ = ["LineNumberArea"]
