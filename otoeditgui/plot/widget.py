"""QPainter view of the timing plot: paints the editor's primitive list."""

from __future__ import annotations

import numpy as np

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QFont, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import QWidget

from otolib.controller import InputController
from otolib.editor import OtoEditor
from otolib.events import SELECTION_CHANGED, TIMING_CHANGED
from otolib.overlay import Y_MAX, Heatmap, Line, Marker, Polyline, Rect

from ..log import dbg
from ..theme import COLORS, rgba
from .heatmap import HeatmapImage

_POLL_INTERVAL_MS = 30

_KEY_NAMES = {
    Qt.Key_1: "1", Qt.Key_2: "2", Qt.Key_3: "3", Qt.Key_4: "4", Qt.Key_5: "5",
    Qt.Key_W: "W", Qt.Key_S: "S", Qt.Key_A: "A", Qt.Key_D: "D",
    Qt.Key_Q: "Q", Qt.Key_E: "E", Qt.Key_F: "F",
}


def peaks_for_view(ys: np.ndarray, width: int) -> tuple[np.ndarray, np.ndarray]:
    """Per-pixel (mins, maxs) of *ys* spread over *width* columns."""
    n = len(ys)
    if n == 0 or width <= 0:
        return np.zeros(0), np.zeros(0)
    width = min(width, n)
    starts = np.arange(width, dtype=np.int64) * n // width
    maxs = np.maximum.reduceat(ys, starts).astype(np.float64)
    mins = np.minimum.reduceat(ys, starts).astype(np.float64)
    return mins, maxs


class OtoPlotWidget(QWidget):
    """Paints waveform, spectrogram and timing overlay for the selected sample.

    The widget holds no plot state of its own: every paint reads
    ``editor.primitives`` and ``editor.view``.  Pointer moves and key
    presses go to the :class:`InputController`; a timer drains finished
    spectrogram work on the GUI thread.
    """

    pointer_moved = Signal(float)  # clamped ms under the pointer

    def __init__(self, editor: OtoEditor, controller: InputController | None = None,
                 parent=None, *, colormap: str = "magma"):
        super().__init__(parent)
        self._editor = editor
        self._controller = controller or InputController(editor)
        self._heatmap_image = HeatmapImage(colormap)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(True)
        self.setMinimumSize(400, 200)

        self._unsubscribers = [
            editor.bus.subscribe(TIMING_CHANGED, self._on_model_changed),
            editor.bus.subscribe(SELECTION_CHANGED, self._on_model_changed),
        ]

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(_POLL_INTERVAL_MS)
        self._poll_timer.timeout.connect(self._poll)
        self._poll_timer.start()

    @property
    def controller(self) -> InputController:
        return self._controller

    def set_colormap(self, name: str):
        self._heatmap_image.set_colormap(name)
        self.update()

    # ── Coordinate helpers ─────────────────────────────────────────────────

    def x_to_px(self, x: float) -> float:
        view = self._editor.view
        if view is None or view.span <= 0:
            return 0.0
        return (x - view.x_min) / view.span * self.width()

    def px_to_x(self, px: float) -> float:
        view = self._editor.view
        if view is None or self.width() <= 0:
            return 0.0
        return view.x_min + px / self.width() * view.span

    def y_to_px(self, y: float) -> float:
        return self.height() * (1.0 - y / Y_MAX)

    # ── Qt events ──────────────────────────────────────────────────────────

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(COLORS["bg"]))
        if self._editor.view is None or not self._editor.primitives:
            painter.setPen(QPen(QColor(COLORS["dim"])))
            painter.drawText(self.rect(), Qt.AlignCenter, "No waveform loaded")
            painter.end()
            return
        painter.setRenderHint(QPainter.Antialiasing, True)
        for prim in self._editor.primitives:
            if isinstance(prim, Heatmap):
                self._paint_heatmap(painter, prim)
            elif isinstance(prim, Polyline):
                self._paint_polyline(painter, prim)
            elif isinstance(prim, Rect):
                self._paint_rect(painter, prim)
            elif isinstance(prim, Line):
                painter.setPen(QPen(rgba(prim.color), prim.width))
                painter.drawLine(QPointF(self.x_to_px(prim.x0), self.y_to_px(prim.y0)),
                                 QPointF(self.x_to_px(prim.x1), self.y_to_px(prim.y1)))
            elif isinstance(prim, Marker):
                self._paint_marker(painter, prim)
        painter.end()

    def mouseMoveEvent(self, event):
        coord = self.px_to_x(event.position().x())
        self.pointer_moved.emit(self._controller.on_pointer_moved(coord))
        super().mouseMoveEvent(event)

    def keyPressEvent(self, event):
        name = _KEY_NAMES.get(event.key())
        if name is not None and event.modifiers() == Qt.NoModifier:
            if self._controller.handle_key(name):
                event.accept()
                self.update()
                return
        super().keyPressEvent(event)

    # ── Painting helpers ───────────────────────────────────────────────────

    def _paint_heatmap(self, painter: QPainter, prim: Heatmap):
        image = self._heatmap_image.image_for(prim.data)
        left = self.x_to_px(prim.x0)
        right = self.x_to_px(prim.x1)
        top = self.y_to_px(prim.y1)
        bottom = self.y_to_px(prim.y0)
        painter.drawImage(QRectF(left, top, right - left, bottom - top), image)

    def _paint_polyline(self, painter: QPainter, prim: Polyline):
        view = self._editor.view
        lo = int(np.searchsorted(prim.xs, view.x_min, side="left"))
        hi = int(np.searchsorted(prim.xs, view.x_max, side="right"))
        lo = max(lo - 1, 0)
        hi = min(hi + 1, len(prim.xs))
        if hi - lo < 2:
            return
        painter.setPen(QPen(rgba(prim.color), prim.width))
        width = self.width()
        if hi - lo <= width * 2:
            poly = QPolygonF([QPointF(self.x_to_px(x), self.y_to_px(y))
                              for x, y in zip(prim.xs[lo:hi], prim.ys[lo:hi])])
            painter.drawPolyline(poly)
            return
        x_left = self.x_to_px(prim.xs[lo])
        x_right = self.x_to_px(prim.xs[hi - 1])
        mins, maxs = peaks_for_view(prim.ys[lo:hi], int(x_right - x_left) + 1)
        step = (x_right - x_left) / max(len(mins), 1)
        for i in range(len(mins)):
            px = x_left + i * step
            painter.drawLine(QPointF(px, self.y_to_px(mins[i])),
                             QPointF(px, self.y_to_px(maxs[i])))

    def _paint_rect(self, painter: QPainter, prim: Rect):
        left = self.x_to_px(prim.x0)
        right = self.x_to_px(prim.x1)
        top = self.y_to_px(prim.y1)
        bottom = self.y_to_px(prim.y0)
        painter.fillRect(QRectF(left, top, right - left, bottom - top), rgba(prim.fill))

    def _paint_marker(self, painter: QPainter, prim: Marker):
        px = self.x_to_px(prim.x)
        color = rgba(prim.color)
        painter.setPen(QPen(color, 1))
        painter.drawLine(QPointF(px, 0), QPointF(px, self.height()))
        painter.setFont(QFont("Consolas", 8, QFont.Bold))
        painter.drawText(QPointF(px + 3, self.y_to_px(prim.label_y) - 3), prim.label)

    # ── Model callbacks ────────────────────────────────────────────────────

    def _poll(self):
        if self._editor.poll():
            dbg("spectrogram merged for %s", self._editor.wav_path)
            self.update()

    def _on_model_changed(self, **_data):
        self.update()

    def detach(self):
        """Stop polling and unsubscribe from the editor's bus."""
        self._poll_timer.stop()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
