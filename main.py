import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow

from ScribePyside.widgets import CodeEditor
from ScribePyside.widgets.code_editor import get_language
from scribe.document import EditorDocument
from scribe.settings_schema import NormalizedEditorConfig

APP_NAME = "Scribe"

logger = logging.getLogger(__name__)


class LogFormatter(logging.Formatter):
    """Console formatter coloured by level."""

    COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if self.use_colors:
            return f"{self.COLORS.get(record.levelno, '')}{formatted}{self.RESET}"
        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


class ScribeWindow(QMainWindow):
    def __init__(self, document: EditorDocument):
        super().__init__()
        self.document = document
        self.editor = CodeEditor(self, settings=document.config.as_dict(), fold_flags=document.fold_flags)
        self.setCentralWidget(self.editor)

        self._language_label = QLabel(self)
        self.statusBar().addPermanentWidget(self._language_label)
        self.editor.languageChanged.connect(self._on_language_changed)
        self.editor.textChanged.connect(self._sync_document_text)

        reindent = QAction("Reindent", self)
        reindent.setShortcut(QKeySequence("Ctrl+Shift+I"))
        reindent.triggered.connect(self.editor.reindent_all)
        self.menuBar().addMenu("&Edit").addAction(reindent)

        self.editor.setPlainText(document.text)
        if document.file_path:
            self.editor.set_file_path(document.file_path)
        self.editor.set_language(document.language)
        self._on_language_changed(document.language.id)
        self.resize(960, 720)

    def _sync_document_text(self):
        self.document.set_text(self.editor.toPlainText())

    def _on_language_changed(self, language_id: str):
        lang = get_language(language_id)
        self.document.set_language(lang)
        self._language_label.setText(lang.display_name)
        title = Path(self.document.file_path).name if self.document.file_path else "Untitled"
        self.setWindowTitle(f"{title} [{lang.abbreviation or 'TXT'}] - {APP_NAME}")

    def closeEvent(self, event):
        self.editor.shutdown()
        super().closeEvent(event)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="scribe", description="Language-aware text editor")
    parser.add_argument("file", nargs="?", help="file to open")
    parser.add_argument("--theme", default="light", help="light, dark or notepad++")
    parser.add_argument("--tab-width", type=int, default=4)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", type=Path, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(list(sys.argv[1:] if argv is None else argv))
    setup_logging(args.log_level, args.log_file)

    config = NormalizedEditorConfig.from_mapping({"theme": args.theme, "tab_width": args.tab_width})
    text = ""
    if args.file:
        path = Path(args.file)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Starting new file %s", path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot open %s: %s", path, exc)
            return 1
    document = EditorDocument(text=text, file_path=args.file, config=config)

    app = QApplication([sys.argv[0]])
    app.setStyle("Fusion")
    app.setApplicationName(APP_NAME)
    window = ScribeWindow(document)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
