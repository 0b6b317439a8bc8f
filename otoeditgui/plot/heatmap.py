"""Spectrogram colormaps and heatmap to QImage conversion."""

from __future__ import annotations

import numpy as np

from PySide6.QtGui import QImage


def _lut(stops: list[tuple[float, tuple[int, int, int]]]) -> np.ndarray:
    """(256, 4) opaque RGBA table interpolated between colour *stops*."""
    pos = np.array([p for p, _ in stops])
    rgb = np.array([c for _, c in stops], dtype=np.float64)
    ramp = np.linspace(0.0, 1.0, 256)
    table = np.full((256, 4), 255, dtype=np.uint8)
    for ch in range(3):
        table[:, ch] = np.interp(ramp, pos, rgb[:, ch]).round().astype(np.uint8)
    return table


SPECTROGRAM_COLORMAPS: dict[str, np.ndarray] = {
    "magma": _lut([(0.0, (0, 0, 4)), (0.25, (81, 18, 124)), (0.5, (183, 55, 121)),
                   (0.75, (254, 159, 109)), (1.0, (252, 253, 191))]),
    "viridis": _lut([(0.0, (68, 1, 84)), (0.25, (59, 82, 139)), (0.5, (33, 145, 140)),
                     (0.75, (94, 201, 98)), (1.0, (253, 231, 37))]),
    "grayscale": _lut([(0.0, (0, 0, 0)), (1.0, (255, 255, 255))]),
}


def heatmap_rgba(data: np.ndarray, colormap: str = "magma") -> np.ndarray:
    """Colour *data* by its own min..max range as (rows, cols, 4) uint8.

    Row 0 of *data* stays the top row of the image.
    """
    lo, hi = float(data.min()), float(data.max())
    scaled = (data - lo) * (255.0 / max(hi - lo, 1e-9))
    index = np.clip(scaled, 0, 255).astype(np.uint8)
    table = SPECTROGRAM_COLORMAPS.get(colormap, SPECTROGRAM_COLORMAPS["magma"])
    return np.ascontiguousarray(table[index])


class HeatmapImage:
    """Caches the QImage of the current heatmap (rebuilt when it changes)."""

    def __init__(self, colormap: str = "magma"):
        self._colormap = colormap
        self._source: np.ndarray | None = None
        self._data: np.ndarray | None = None   # keeps the buffer alive
        self._image: QImage | None = None

    def set_colormap(self, name: str) -> None:
        if name not in SPECTROGRAM_COLORMAPS or name == self._colormap:
            return
        self._colormap = name
        self._image = None

    def image_for(self, data: np.ndarray) -> QImage:
        if self._image is None or self._source is not data:
            rgba = heatmap_rgba(data, self._colormap)
            h, w = rgba.shape[:2]
            self._data = rgba
            self._image = QImage(rgba.data, w, h, w * 4, QImage.Format.Format_RGBA8888)
            self._source = data
        return self._image
