"""Tests for editor parameter defaults, validation and presets."""

import json
from pathlib import Path

import pytest

from otolib.config import (
    EDITOR_PARAMS, ConfigError, default_config, load_preset, merge_configs,
    save_preset, validate_config, validate_param_values,
)


def test_defaults_match_pipeline_constants():
    cfg = default_config()
    assert cfg["fft_size"] == 1024
    assert cfg["mel_bands"] == 80
    assert cfg["frame_rate_hz"] == 400
    assert cfg["log_floor"] == 1e-4
    assert cfg["text_encoding"] == "shift_jis"
    assert set(cfg) == {p.key for p in EDITOR_PARAMS}
    validate_config(cfg)


def test_merge_is_left_to_right():
    merged = merge_configs(default_config(), {"mel_bands": 40}, {"mel_bands": 64})
    assert merged["mel_bands"] == 64
    assert merged["fft_size"] == 1024


@pytest.mark.parametrize("key,value", [
    ("fft_size", 16),
    ("fft_size", True),
    ("mel_bands", "80"),
    ("log_floor", 0.0),
    ("window", "kaiser"),
    ("max_workers", 9),
    ("text_encoding", "no-such-codec"),
])
def test_invalid_values_are_reported(key, value):
    errors = validate_param_values(EDITOR_PARAMS, {key: value})
    assert [e.key for e in errors] == [key]
    with pytest.raises(ConfigError):
        validate_config(merge_configs(default_config(), {key: value}))


def test_log_floor_accepts_int():
    assert validate_param_values(EDITOR_PARAMS, {"log_floor": 1}) == []


def test_preset_round_trip(tmp_path: Path):
    path = tmp_path / "presets" / "wide.json"
    cfg = merge_configs(default_config(), {"mel_bands": 128, "colormap": "viridis"})
    save_preset(cfg, str(path), description="wide")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["schema_version"] == "1.0"
    assert data["mel_bands"] == 128
    assert "fft_size" not in data
    assert load_preset(str(path)) == {"mel_bands": 128, "colormap": "viridis"}


def test_load_preset_errors(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_preset(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_preset(str(bad))
    arr = tmp_path / "arr.json"
    arr.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_preset(str(arr))


def test_error_messages_name_the_label():
    errors = validate_param_values(EDITOR_PARAMS, {"max_workers": 0, "colormap": "jet"})
    messages = {e.key: e.message for e in errors}
    assert messages["max_workers"] == "Spectrogram workers must be at least 1."
    assert messages["colormap"].startswith("Spectrogram colormap must be one of 'magma'")


def test_load_preset_schema_versions(tmp_path: Path):
    minor = tmp_path / "minor.json"
    minor.write_text('{"schema_version": "1.4", "mel_bands": 64}', encoding="utf-8")
    assert load_preset(str(minor)) == {"mel_bands": 64}
    bare = tmp_path / "bare.json"
    bare.write_text('{"fft_size": 2048}', encoding="utf-8")
    assert load_preset(str(bare)) == {"fft_size": 2048}
    major = tmp_path / "major.json"
    major.write_text('{"schema_version": "2.0", "mel_bands": 64}', encoding="utf-8")
    with pytest.raises(ConfigError, match="schema 2.0"):
        load_preset(str(major))
