"""Tests for the mel heatmap computation."""

import numpy as np
import pytest

from otolib.coords import hop_size
from otolib.spectrogram import _mel_filterbank, compute_mel_heatmap


def _tone(freq, sr=16000, seconds=0.5):
    t = np.arange(int(sr * seconds)) / sr
    return 0.5 * np.sin(2 * np.pi * freq * t)


def test_heatmap_shape_matches_frame_grid():
    sr = 16000
    x = _tone(440.0, sr)
    heat = compute_mel_heatmap(x, sr)
    assert heat.shape == (80, len(x) // hop_size(sr) + 1)


def test_empty_input_returns_none():
    assert compute_mel_heatmap(np.zeros(0), 44100) is None


def test_silence_sits_at_log_floor():
    heat = compute_mel_heatmap(np.zeros(2000), 16000)
    assert np.allclose(heat, np.log(1e-4))


def test_low_frequencies_are_in_bottom_rows():
    sr = 16000
    low = compute_mel_heatmap(_tone(150.0, sr), sr)
    high = compute_mel_heatmap(_tone(6000.0, sr), sr)
    mid = low.shape[1] // 2
    assert int(np.argmax(low[:, mid])) > int(np.argmax(high[:, mid]))
    assert int(np.argmax(low[:, mid])) >= 60


def test_multichannel_is_mixed():
    sr = 16000
    mono = _tone(440.0, sr)
    stereo = np.column_stack([mono, mono])
    np.testing.assert_allclose(compute_mel_heatmap(stereo, sr),
                               compute_mel_heatmap(mono, sr))


def test_filterbank_shape_and_range():
    fb = _mel_filterbank(16000, 1024, 80)
    assert fb.shape == (80, 513)
    assert fb.min() >= 0.0
    assert fb.max() <= 1.0 + 1e-12
    assert np.all(fb.sum(axis=1) > 0)


@pytest.mark.parametrize("window", ["hann", "hamming", "blackman"])
def test_window_choices(window):
    heat = compute_mel_heatmap(_tone(440.0), 16000, window=window)
    assert np.all(np.isfinite(heat))
