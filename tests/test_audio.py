"""Tests for waveform decoding and header probing."""

from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from otolib.audio import WaveformDecodeError, decode_waveform, duration_ms, probe_duration_ms

from conftest import write_sine


def test_decode_mono(tmp_path: Path):
    path = write_sine(tmp_path / "a.wav", seconds=0.5, sr=22050)
    rate, samples = decode_waveform(str(path))
    assert rate == 22050
    assert samples.ndim == 1
    assert len(samples) == 11025
    assert duration_ms(samples, rate) == pytest.approx(500.0)


def test_decode_multichannel_uses_first_channel(tmp_path: Path):
    path = tmp_path / "st.wav"
    left = np.full(100, 0.25)
    right = np.full(100, -0.5)
    sf.write(path, np.column_stack([left, right]), 16000, subtype="FLOAT")
    _rate, samples = decode_waveform(str(path))
    np.testing.assert_allclose(samples, left)


def test_probe_reads_header(tmp_path: Path):
    path = write_sine(tmp_path / "a.wav", seconds=0.8)
    assert probe_duration_ms(str(path)) == pytest.approx(800.0)


@pytest.mark.parametrize("reader", [decode_waveform, probe_duration_ms])
def test_unreadable_files_raise(tmp_path: Path, reader):
    bad = tmp_path / "bad.wav"
    bad.write_bytes(b"RIFF????")
    with pytest.raises(WaveformDecodeError):
        reader(str(bad))
    with pytest.raises(WaveformDecodeError):
        reader(str(tmp_path / "missing.wav"))


def test_duration_of_bad_rate():
    assert duration_ms(np.zeros(10), 0) == 0.0
