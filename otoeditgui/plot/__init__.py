"""Timing plot subpackage."""

from .widget import OtoPlotWidget, peaks_for_view
from .heatmap import HeatmapImage, SPECTROGRAM_COLORMAPS, heatmap_rgba

__all__ = ["OtoPlotWidget", "peaks_for_view", "HeatmapImage",
           "SPECTROGRAM_COLORMAPS", "heatmap_rgba"]
