"""Draw primitives for the timing plot.

The plot uses frame coordinates on x (one unit per hop) and a fixed
0–120 band on y: the heatmap fills ``[0, 80]``, the waveform trace is
centred on 100 and the timing overlay occupies ``[80, 120]``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from .coords import CoordinateMapper
from .models import TimedSample

Y_MAX = 120.0
HEATMAP_TOP = 80.0
OVERLAY_LOW = 80.0
OVERLAY_HIGH = 119.0
WAVE_CENTER = 100.0
WAVE_SCALE = 20.0

# RGBA, alpha 0x7F for fills
BLUE_FILL = (173, 216, 230, 127)
PINK_FILL = (255, 192, 203, 127)
BLUE_LINE = (78, 166, 234, 255)
WAVE_COLOR = (0, 0, 255, 255)
OVERLAP_COLOR = (0, 255, 0, 255)
PREUTTER_COLOR = (255, 0, 0, 255)


@dataclass(frozen=True)
class Heatmap:
    data: np.ndarray
    x0: float
    x1: float
    y0: float
    y1: float


@dataclass(frozen=True)
class Polyline:
    xs: np.ndarray
    ys: np.ndarray
    color: tuple
    width: float = 1.0


@dataclass(frozen=True)
class Rect:
    x0: float
    x1: float
    y0: float
    y1: float
    fill: tuple


@dataclass(frozen=True)
class Line:
    x0: float
    y0: float
    x1: float
    y1: float
    color: tuple
    width: float = 2.0


@dataclass(frozen=True)
class Marker:
    """Vertical line across the plot with a text label at ``label_y``."""
    x: float
    color: tuple
    label: str
    label_y: float = OVERLAY_LOW


Primitive = Union[Heatmap, Polyline, Rect, Line, Marker]


class OverlayRenderer:
    """Derives the ordered primitive list for one redraw.

    :meth:`render` always returns a new list; callers replace whatever
    they drew before with it.
    """

    def render(self, sample: TimedSample, mapper: CoordinateMapper,
               total_ms: float, *,
               heatmap: np.ndarray | None = None,
               waveform: np.ndarray | None = None,
               ) -> list[Primitive]:
        prims: list[Primitive] = []
        n_samples = len(waveform) if waveform is not None else 0
        dur_x = (mapper.duration_coord(n_samples) if waveform is not None
                 else mapper.to_coord(total_ms))

        if heatmap is not None and heatmap.size > 0:
            prims.append(Heatmap(heatmap, 0.0, float(heatmap.shape[1]),
                                 0.0, HEATMAP_TOP))
        if waveform is not None and n_samples > 0:
            xs = mapper.sample_to_coord(np.arange(n_samples, dtype=np.float64))
            ys = np.asarray(waveform, dtype=np.float64) * WAVE_SCALE + WAVE_CENTER
            prims.append(Polyline(xs, ys, WAVE_COLOR))

        prims.extend(self.timing_primitives(sample, mapper, total_ms, dur_x))
        return prims

    def timing_primitives(self, sample: TimedSample, mapper: CoordinateMapper,
                          total_ms: float, dur_x: float) -> list[Primitive]:
        """Fills, boundary lines and markers for the timing fields."""
        cutoff_ms = sample.cutoff_ms(total_ms)
        offset_x = mapper.to_coord(sample.offset)
        consonant_x = mapper.to_coord(sample.consonant_ms)
        preutter_x = mapper.to_coord(sample.preutter_ms)
        overlap_x = mapper.to_coord(sample.overlap_ms)
        cutoff_x = mapper.to_coord(cutoff_ms)

        prims: list[Primitive] = []
        if offset_x > 0:
            prims.append(Rect(0.0, offset_x, OVERLAY_LOW, Y_MAX, BLUE_FILL))
        if consonant_x > offset_x:
            prims.append(Rect(offset_x, consonant_x, OVERLAY_LOW, Y_MAX, PINK_FILL))
        if cutoff_ms <= total_ms:
            prims.append(Rect(cutoff_x, dur_x, OVERLAY_LOW, Y_MAX, BLUE_FILL))

        prims.append(Line(offset_x, OVERLAY_LOW, overlap_x, OVERLAY_HIGH, BLUE_LINE))
        prims.append(Line(overlap_x, OVERLAY_HIGH, cutoff_x, OVERLAY_HIGH, BLUE_LINE))
        prims.append(Line(cutoff_x, OVERLAY_HIGH, cutoff_x, OVERLAY_LOW, BLUE_LINE))

        prims.append(Marker(overlap_x, OVERLAP_COLOR, "OVL"))
        prims.append(Marker(preutter_x, PREUTTER_COLOR, "PRE"))
        return prims
