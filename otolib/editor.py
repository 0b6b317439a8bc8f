"""Interactive-context orchestration of one voicebank's timing editor."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable

import numpy as np

from .audio import WaveformDecodeError, decode_waveform, duration_ms
from .catalog import load_timing_catalog, save_timing_catalog
from .config import default_config, merge_configs
from .coords import CoordinateMapper, ViewRange
from .events import EventBus, SELECTION_CHANGED, TIMING_CHANGED
from .models import TimedSample, Voicebank
from .overlay import OverlayRenderer, Primitive
from .pipeline import SpectrogramPipeline
from .timing import TimingModel

log = logging.getLogger(__name__)


class OtoEditor:
    """Owns the selection, the decoded waveform and the render state.

    Everything here runs on the single interactive context: timing edits,
    coordinate mapping and primitive rebuilds.  Spectrogram heatmaps are
    computed on the :class:`SpectrogramPipeline` and merged only from
    :meth:`poll`.

    The decoder, catalog loader and catalog saver are injectable so other
    front ends (and tests) can supply their own.
    """

    def __init__(self, event_bus: EventBus | None = None,
                 pipeline: SpectrogramPipeline | None = None,
                 config: dict[str, Any] | None = None, *,
                 decoder: Callable[[str], tuple[int, np.ndarray]] = decode_waveform,
                 loader: Callable[[str, str], Voicebank] = load_timing_catalog,
                 saver: Callable[[Voicebank], None] = save_timing_catalog):
        self.config = merge_configs(default_config(), config or {})
        self.bus = event_bus if event_bus is not None else EventBus()
        self._pipeline = pipeline if pipeline is not None else SpectrogramPipeline(self.config)
        self._decoder = decoder
        self._loader = loader
        self._saver = saver
        self._renderer = OverlayRenderer()
        self.timing = TimingModel(self.bus, on_modified=self._mark_dirty)

        self.voicebank: Voicebank | None = None
        self.selected_index: int = -1
        self.primitives: list[Primitive] = []

        self.wav_path: str | None = None
        self.samplerate: int = 0
        self.waveform: np.ndarray | None = None
        self.heatmap: np.ndarray | None = None
        self.mapper: CoordinateMapper | None = None
        self.total_duration_ms: float = 0.0
        self.outer: ViewRange | None = None
        self.view: ViewRange | None = None

        self._unsubscribers = [
            self.bus.subscribe(TIMING_CHANGED, self._on_timing_changed),
            self.bus.subscribe(SELECTION_CHANGED, self._on_selection_changed),
        ]

    # ── Voicebank ──────────────────────────────────────────────────────────

    def load_voicebank(self, location: str) -> Voicebank:
        """Load a voicebank's catalog and select its first sample."""
        self.voicebank = self._loader(location, self.config["text_encoding"])
        self.selected_index = -1
        self.timing.sample = None
        self._clear_waveform()
        self.primitives = []
        if self.voicebank.samples:
            self.select(0)
        return self.voicebank

    def reload(self) -> None:
        """Re-read the catalog, keeping the selected index where possible."""
        if self.voicebank is None:
            return
        index = self.selected_index
        self.voicebank = self._loader(self.voicebank.location, self.voicebank.encoding)
        self.timing.sample = None
        self.selected_index = -1
        if self.voicebank.samples:
            self.select(max(0, min(index, len(self.voicebank.samples) - 1)))
        else:
            self.primitives = []

    def save(self) -> None:
        """Persist the catalog and reload it.

        Raises :class:`~otolib.catalog.CatalogError` on failure, leaving the
        in-memory edits and the dirty flag as they were.
        """
        if self.voicebank is None:
            return
        self._saver(self.voicebank)
        self.reload()

    @property
    def dirty(self) -> bool:
        return self.voicebank is not None and self.voicebank.dirty

    # ── Selection ──────────────────────────────────────────────────────────

    @property
    def selected(self) -> TimedSample | None:
        return self.timing.sample

    def select(self, index: int) -> None:
        bank = self.voicebank
        if bank is None or not bank.samples:
            return
        index = max(0, min(index, len(bank.samples) - 1))
        sample = bank.samples[index]
        self.selected_index = index
        self.timing.sample = sample
        self._draw(sample)
        self.bus.publish_selection(sample)

    def step_selection(self, delta: int) -> None:
        if self.selected_index < 0:
            return
        self.select(self.selected_index + delta)

    # ── Timing setters (absolute ms) ───────────────────────────────────────
    #
    # Without a decoded waveform the file length is unknown, so a from-end
    # cutoff cannot be resolved and the record is left alone.

    def set_offset(self, ms: float) -> None:
        if self.mapper is not None:
            self.timing.set_offset(ms, self.total_duration_ms)

    def set_overlap(self, ms: float) -> None:
        if self.mapper is not None:
            self.timing.set_overlap(ms, self.total_duration_ms)

    def set_preutter(self, ms: float) -> None:
        if self.mapper is not None:
            self.timing.set_preutter(ms, self.total_duration_ms)

    def set_consonant(self, ms: float) -> None:
        if self.mapper is not None:
            self.timing.set_consonant(ms, self.total_duration_ms)

    def set_cutoff(self, ms: float) -> None:
        if self.mapper is not None:
            self.timing.set_cutoff(ms, self.total_duration_ms)

    # ── View ───────────────────────────────────────────────────────────────

    def zoom(self, factor: float) -> None:
        if self.view is not None:
            self.view = self.view.zoomed(factor)

    def pan(self, fraction: float) -> None:
        if self.view is not None:
            self.view = self.view.shifted(self.view.span * fraction)

    def fit_view(self) -> None:
        if self.outer is not None:
            self.view = ViewRange(self.outer.x_min, self.outer.x_max)

    def pointer_to_ms(self, coord: float) -> float:
        if self.mapper is None:
            return 0.0
        return self.mapper.pointer_to_ms(coord, self.total_duration_ms)

    # ── Background results ─────────────────────────────────────────────────

    def poll(self) -> bool:
        """Merge finished spectrogram work.  Returns True if a redraw happened."""
        merged = False
        for result in self._pipeline.drain():
            if result.tag != self.wav_path:
                log.debug("ignoring spectrogram for %s, showing %s",
                          result.tag, self.wav_path)
                continue
            if result.error is not None:
                log.debug("spectrogram for %s failed: %s", result.tag, result.error)
                continue
            if result.heatmap is None:
                continue
            log.debug("spectrogram for %s ready in %.1f ms",
                      result.tag, result.elapsed_ms)
            self.heatmap = result.heatmap
            merged = True
        if merged:
            self._render()
        return merged

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._pipeline.shutdown()

    @property
    def pipeline(self) -> SpectrogramPipeline:
        return self._pipeline

    # ── Internal helpers ───────────────────────────────────────────────────

    def _draw(self, sample: TimedSample) -> None:
        if not os.path.isfile(sample.file):
            self._clear_waveform()
            self.primitives = []
            return
        load_wav = self.wav_path != sample.file
        if load_wav:
            try:
                rate, samples = self._decoder(sample.file)
                mapper = CoordinateMapper(rate, self.config["frame_rate_hz"])
            except (WaveformDecodeError, ValueError) as e:
                log.warning("Failed to load waveform %s: %s", sample.file, e)
                self._clear_waveform()
                self.primitives = []
                return
            self.wav_path = sample.file
            self.samplerate = rate
            self.waveform = samples
            self.mapper = mapper
            self.total_duration_ms = duration_ms(samples, rate)
            self.heatmap = None
            self.outer = ViewRange(0.0, mapper.duration_coord(len(samples)))
            self._pipeline.submit(samples, rate, tag=sample.file)
        self._render()
        if load_wav:
            self.fit_view()

    def _render(self) -> None:
        sample = self.timing.sample
        if sample is None or self.waveform is None or self.mapper is None:
            self.primitives = []
            return
        self.primitives = self._renderer.render(
            sample, self.mapper, self.total_duration_ms,
            heatmap=self.heatmap, waveform=self.waveform,
        )

    def _clear_waveform(self) -> None:
        self.wav_path = None
        self.samplerate = 0
        self.waveform = None
        self.heatmap = None
        self.mapper = None
        self.total_duration_ms = 0.0
        self.outer = None
        self.view = None
        self._pipeline.invalidate()

    def _mark_dirty(self) -> None:
        if self.voicebank is not None:
            self.voicebank.dirty = True

    def _on_timing_changed(self, external_origin: bool = False,
                           sample: TimedSample | None = None, **_data) -> None:
        if external_origin:
            self.reload()
        else:
            self._render()

    def _on_selection_changed(self, sample: TimedSample | None = None, **_data) -> None:
        if sample is None or sample is self.timing.sample or self.voicebank is None:
            return
        index = self.voicebank.index_of(sample)
        if index >= 0:
            self.select(index)
