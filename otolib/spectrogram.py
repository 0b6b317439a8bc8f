"""Log-magnitude mel heatmap used as the spectral backdrop of the timing plot."""

from __future__ import annotations

import numpy as np
from scipy.signal import get_window, stft as scipy_stft

from .coords import FRAME_RATE_HZ, hop_size

FFT_SIZE = 1024
MEL_BANDS = 80
LOG_FLOOR = 1e-4


def _mel_filterbank(sr: int, n_fft: int, n_mels: int = MEL_BANDS) -> np.ndarray:
    """Triangular HTK-mel filters spanning 0 Hz to Nyquist, shape (n_mels, n_fft // 2 + 1)."""
    top_mel = 2595.0 * np.log10(1.0 + (sr / 2.0) / 700.0)
    edges_hz = 700.0 * (10.0 ** (np.linspace(0.0, top_mel, n_mels + 2) / 2595.0) - 1.0)
    edges = np.floor((n_fft + 1) * edges_hz / sr).astype(np.intp)

    left = edges[:-2]
    center = np.maximum(edges[1:-1], left + 1)
    right = np.maximum(edges[2:], center + 1)
    left, center, right = left[:, None], center[:, None], right[:, None]

    bins = np.arange(n_fft // 2 + 1)[None, :]
    rising = (bins - left) / (center - left)
    falling = (right - bins) / (right - center)
    fb = np.where((bins >= left) & (bins < center), rising, 0.0)
    return np.where((bins >= center) & (bins < right), falling, fb)


def compute_mel_heatmap(samples: np.ndarray, sample_rate: int, *,
                        fft_size: int = FFT_SIZE,
                        mel_bands: int = MEL_BANDS,
                        frame_rate_hz: int = FRAME_RATE_HZ,
                        log_floor: float = LOG_FLOOR,
                        window: str = "hann",
                        ) -> np.ndarray | None:
    """Compute the mel heatmap of a waveform.

    The signal is zero-padded by ``fft_size / 2`` on both sides so frame
    ``i`` is centred on sample ``i * hop``, which puts frame ``i`` at frame
    coordinate ``i`` of the timing plot.

    Returns a float64 array of shape (mel_bands, n_frames) holding
    ``log(max(band_energy, log_floor))`` with band 0 (lowest frequency) in
    the last row, or None for empty input.
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim > 1:
        data = np.mean(data, axis=1)
    if data.size == 0:
        return None
    hop = hop_size(sample_rate, frame_rate_hz)
    half = fft_size // 2
    padded = np.concatenate([np.zeros(half), data, np.zeros(half)])
    win = get_window(window, fft_size)
    _f, _t, zxx = scipy_stft(
        padded, fs=sample_rate, nperseg=fft_size,
        noverlap=fft_size - hop, window=win,
        boundary=None, padded=False,
    )
    # scipy scales by 1/sum(window); undo it to get raw FFT magnitudes
    power = (np.abs(zxx) * float(np.sum(win))) ** 2
    fb = _mel_filterbank(sample_rate, fft_size, mel_bands)
    mel = fb @ power  # (mel_bands, n_frames)
    heatmap = np.log(np.maximum(mel, log_floor))
    return heatmap[::-1, :].copy()
