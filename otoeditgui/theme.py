"""Dark palette for the oto editor and overlay colour conversion."""

from __future__ import annotations

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

COLORS = {
    "bg": "#1e1e1e",      # plot background
    "panel": "#252525",
    "control": "#3a3a3a",
    "text": "#dddddd",
    "dim": "#888888",     # placeholder text, status labels
    "selection": "#2a6db5",
}

_PALETTE_ROLES = {
    QPalette.Window: "bg",
    QPalette.WindowText: "text",
    QPalette.Base: "panel",
    QPalette.AlternateBase: "control",
    QPalette.Text: "text",
    QPalette.Button: "control",
    QPalette.ButtonText: "text",
    QPalette.Highlight: "selection",
}


def rgba(color: tuple) -> QColor:
    """QColor from an overlay (r, g, b[, a]) tuple."""
    return QColor(*color)


def apply_dark_theme(window) -> None:
    palette = QPalette()
    for role, key in _PALETTE_ROLES.items():
        palette.setColor(role, QColor(COLORS[key]))
    palette.setColor(QPalette.HighlightedText, QColor("white"))
    QApplication.instance().setPalette(palette)
    window.setStyleSheet(
        f"QMainWindow {{ background-color: {COLORS['bg']}; }}"
        f" QStatusBar {{ background-color: {COLORS['panel']}; color: {COLORS['dim']}; }}"
    )
