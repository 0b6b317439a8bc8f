"""OtoEdit GUI: PySide6 front-end for voicebank timing editing."""

from .mainwindow import OtoEditorWindow, main

__all__ = ["OtoEditorWindow", "main"]
