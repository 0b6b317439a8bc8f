"""Main window for the oto timing editor."""

from __future__ import annotations

import os
import sys
from typing import Any

from PySide6.QtCore import Slot
from PySide6.QtGui import QAction, QActionGroup, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStatusBar,
)

from otolib.catalog import CatalogError
from otolib.editor import OtoEditor
from otolib.events import SELECTION_CHANGED, TIMING_CHANGED

from .log import dbg, dbg_timed
from .plot import SPECTROGRAM_COLORMAPS, OtoPlotWidget
from .theme import COLORS, apply_dark_theme


class OtoEditorWindow(QMainWindow):
    def __init__(self, config: dict[str, Any] | None = None):
        super().__init__()
        self.setWindowTitle("OtoEdit")
        self.resize(1200, 420)

        self._editor = OtoEditor(config=config)
        self._plot = OtoPlotWidget(self._editor,
                                   colormap=self._editor.config["colormap"])
        self.setCentralWidget(self._plot)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._pointer_label = QLabel("")
        self._pointer_label.setStyleSheet(f"color: {COLORS['dim']};")
        self._status_bar.addPermanentWidget(self._pointer_label)

        self._init_menus()
        apply_dark_theme(self)

        self._plot.pointer_moved.connect(self._on_pointer_moved)
        self._unsubscribers = [
            self._editor.bus.subscribe(TIMING_CHANGED, self._on_model_changed),
            self._editor.bus.subscribe(SELECTION_CHANGED, self._on_model_changed),
        ]

    @property
    def editor(self) -> OtoEditor:
        return self._editor

    @property
    def plot(self) -> OtoPlotWidget:
        return self._plot

    def _init_menus(self):
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open Voicebank...", self)
        open_action.setShortcut(QKeySequence.Open)
        open_action.triggered.connect(self._on_open)
        file_menu.addAction(open_action)

        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence.Save)
        save_action.triggered.connect(self.save)
        file_menu.addAction(save_action)

        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = self.menuBar().addMenu("&View")
        cmap_menu = view_menu.addMenu("Color Theme")
        self._cmap_group = QActionGroup(self)
        current = self._editor.config["colormap"]
        for name in SPECTROGRAM_COLORMAPS:
            act = cmap_menu.addAction(name.capitalize())
            act.setCheckable(True)
            act.setData(name)
            act.setChecked(name == current)
            self._cmap_group.addAction(act)
        self._cmap_group.triggered.connect(self._on_colormap_changed)

    # ── Actions ────────────────────────────────────────────────────────────

    def open_voicebank(self, location: str) -> bool:
        try:
            with dbg_timed("load_voicebank"):
                bank = self._editor.load_voicebank(location)
        except CatalogError as e:
            self._show_error("Open failed", str(e))
            return False
        msg = f"Loaded {len(bank.samples)} samples from {bank.title}"
        if bank.errors:
            msg += f" ({len(bank.errors)} lines skipped)"
        self._status_bar.showMessage(msg, 5000)
        self._refresh_title()
        self._plot.update()
        self._plot.setFocus()
        return True

    def save(self) -> bool:
        if self._editor.voicebank is None:
            return False
        try:
            self._editor.save()
        except CatalogError as e:
            self._status_bar.showMessage(f"Save failed: {e}")
            self._show_error("Save failed", str(e))
            return False
        self._status_bar.showMessage("Saved.", 3000)
        self._refresh_title()
        self._plot.update()
        return True

    def _show_error(self, title: str, message: str):
        QMessageBox.warning(self, title, message)

    def _on_open(self):
        start = ""
        if self._editor.voicebank is not None:
            start = self._editor.voicebank.location
        path = QFileDialog.getExistingDirectory(self, "Open Voicebank", start)
        if path:
            self.open_voicebank(path)

    # ── Callbacks ──────────────────────────────────────────────────────────

    def _on_pointer_moved(self, ms: float):
        self._pointer_label.setText(f"{ms:.1f} ms")

    @Slot(QAction)
    def _on_colormap_changed(self, action):
        self._plot.set_colormap(action.data())

    def _on_model_changed(self, **_data):
        self._refresh_title()

    def _refresh_title(self):
        bank = self._editor.voicebank
        if bank is None:
            self.setWindowTitle("OtoEdit")
            return
        sample = self._editor.selected
        alias = sample.alias if sample is not None else ""
        mark = "*" if self._editor.dirty else ""
        position = ""
        if self._editor.selected_index >= 0:
            position = f" [{self._editor.selected_index + 1}/{len(bank.samples)}]"
        self.setWindowTitle(f"{mark}{bank.title} - {alias}{position} - OtoEdit")

    def closeEvent(self, event):
        if self._editor.dirty:
            ans = QMessageBox.question(
                self, "Unsaved changes",
                "The timing catalog has unsaved changes.\n\nSave before closing?",
                QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
                QMessageBox.Save,
            )
            if ans == QMessageBox.Cancel:
                event.ignore()
                return
            if ans == QMessageBox.Save and not self.save():
                event.ignore()
                return
        self.shutdown()
        super().closeEvent(event)

    def shutdown(self):
        """Detach from the bus and stop background work."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._plot.detach()
        self._editor.close()


def main():
    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    with dbg_timed("window created"):
        window = OtoEditorWindow()
        window.show()

    args = [a for a in sys.argv[1:] if not a.startswith("-")]
    if args and os.path.isdir(args[0]):
        window.open_voicebank(args[0])

    dbg("entering event loop")
    sys.exit(app.exec())
