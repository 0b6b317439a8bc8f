"""Shared fixtures: synthetic waveforms and a small voicebank on disk."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from otolib.models import Cutoff, TimedSample

SAMPLE_RATE = 44100

OTO_LINES = [
    "a.wav=- a,100,80,-300,60,20",
    "ka.wav=- か,50,40,100,30,10",
    "ka.wav=a か,400,30,-200,20,-5",
]


def write_sine(path: Path, seconds: float = 1.0, sr: int = SAMPLE_RATE,
               freq: float = 440.0, channels: int = 1) -> Path:
    n = int(sr * seconds)
    t = np.arange(n) / sr
    tone = 0.3 * np.sin(2 * np.pi * freq * t)
    if channels > 1:
        tone = np.column_stack([tone] * channels)
    sf.write(path, tone, sr)
    return path


@pytest.fixture
def voicebank_dir(tmp_path: Path) -> Path:
    """A voicebank with two waveforms and a Shift-JIS oto.ini."""
    bank = tmp_path / "teto"
    bank.mkdir()
    write_sine(bank / "a.wav", seconds=1.0)
    write_sine(bank / "ka.wav", seconds=0.8, freq=220.0)
    (bank / "oto.ini").write_bytes(("\r\n".join(OTO_LINES) + "\r\n").encode("shift_jis"))
    return bank


@pytest.fixture
def scenario_a() -> TimedSample:
    return TimedSample(file="a.wav", alias="a", offset=0.0, consonant=50.0,
                       cutoff=Cutoff.from_raw(-80.0), preutter=30.0, overlap=10.0)
