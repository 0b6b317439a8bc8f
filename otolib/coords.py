"""Millisecond ↔ spectral-frame coordinate mapping and the visible x-range."""

from __future__ import annotations

from dataclasses import dataclass

FRAME_RATE_HZ = 400


def hop_size(sample_rate: int, frame_rate_hz: int = FRAME_RATE_HZ) -> int:
    """Spectral frame stride in samples (about *frame_rate_hz* frames per second)."""
    if sample_rate <= 0:
        raise ValueError(f"sample rate must be positive, got {sample_rate}")
    return max(sample_rate // frame_rate_hz, 1)


class CoordinateMapper:
    """Converts between ms time and frame coordinates for one sample rate.

    One frame coordinate unit is one hop; the waveform sample at index ``i``
    sits at ``i / hop``.
    """

    def __init__(self, sample_rate: int, frame_rate_hz: int = FRAME_RATE_HZ):
        self.sample_rate = sample_rate
        self.hop_size = hop_size(sample_rate, frame_rate_hz)
        self.ms_to_coord = 0.001 * sample_rate / self.hop_size
        self.coord_to_ms = 1.0 / self.ms_to_coord

    def to_coord(self, ms: float) -> float:
        return ms * self.ms_to_coord

    def to_ms(self, coord: float) -> float:
        return coord * self.coord_to_ms

    def sample_to_coord(self, index):
        """Frame coordinate of waveform sample *index* (scalar or array)."""
        return index / self.hop_size

    def duration_coord(self, n_samples: int) -> float:
        return n_samples / self.hop_size

    def pointer_to_ms(self, coord: float, total_duration_ms: float) -> float:
        """Pointer x coordinate → ms, clamped to the signal."""
        ms = self.to_ms(coord)
        return max(0.0, min(ms, total_duration_ms))


@dataclass
class ViewRange:
    """Visible horizontal span in frame coordinates."""
    x_min: float
    x_max: float

    @property
    def span(self) -> float:
        return self.x_max - self.x_min

    @property
    def center(self) -> float:
        return (self.x_min + self.x_max) / 2.0

    def zoomed(self, factor: float) -> ViewRange:
        """Span scaled by *factor* around the centre."""
        half = self.span * factor / 2.0
        c = self.center
        return ViewRange(c - half, c + half)

    def shifted(self, amount: float) -> ViewRange:
        return ViewRange(self.x_min + amount, self.x_max + amount)
