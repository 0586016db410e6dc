"""Reusable PySide widgets for the Scribe editor."""

from .code_editor import CodeEditor

__all__ = ["CodeEditor"]
