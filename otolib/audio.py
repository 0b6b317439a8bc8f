from __future__ import annotations

import numpy as np
import soundfile as sf


class WaveformDecodeError(Exception):
    """Raised when a waveform file cannot be read."""
    pass


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def decode_waveform(filepath: str) -> tuple[int, np.ndarray]:
    """Read an audio file and return ``(samplerate, mono_samples)``.

    Multi-channel files contribute their first channel, which is the one
    the resampler reads.  Raises :class:`WaveformDecodeError` on any read
    failure.
    """
    try:
        data, samplerate = sf.read(filepath, dtype='float64', always_2d=True)
    except (RuntimeError, OSError) as e:
        raise WaveformDecodeError(f"Cannot decode {filepath}: {e}") from e
    return int(samplerate), np.ascontiguousarray(data[:, 0])


def probe_duration_ms(filepath: str) -> float:
    """Waveform length in ms, read from the file header only."""
    try:
        info = sf.info(filepath)
    except (RuntimeError, OSError) as e:
        raise WaveformDecodeError(f"Cannot read header of {filepath}: {e}") from e
    if info.samplerate <= 0:
        return 0.0
    return info.frames * 1000.0 / info.samplerate


def duration_ms(samples: np.ndarray, samplerate: int) -> float:
    if samplerate <= 0:
        return 0.0
    return len(samples) * 1000.0 / samplerate
