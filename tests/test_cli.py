"""Tests for the otoedit command line."""

import json
from pathlib import Path

import pytest

import otoedit


@pytest.fixture
def violating_bank(voicebank_dir: Path) -> Path:
    with open(voicebank_dir / "oto.ini", "ab") as f:
        f.write("a.wav=v,0,90,-80,30,10\r\n".encode("shift_jis"))
    return voicebank_dir


def _oto(bank: Path) -> str:
    return (bank / "oto.ini").read_bytes().decode("shift_jis")


def test_list(voicebank_dir, capsys):
    assert otoedit.main(["list", str(voicebank_dir)]) == 0
    out = capsys.readouterr().out
    assert "teto" in out
    assert "Timing Records" in out


def test_check_clean_bank(voicebank_dir, capsys):
    assert otoedit.main(["check", str(voicebank_dir)]) == 0
    assert "All cutoffs valid" in capsys.readouterr().out


def test_check_reports_violation(violating_bank):
    assert otoedit.main(["check", str(violating_bank)]) == 1


def test_repair_dry_run_writes_nothing(violating_bank):
    before = _oto(violating_bank)
    assert otoedit.main(["repair", str(violating_bank)]) == 0
    assert _oto(violating_bank) == before


def test_repair_execute(violating_bank):
    assert otoedit.main(["repair", str(violating_bank), "-x"]) == 0
    assert "a.wav=v,0,90,-91,30,10" in _oto(violating_bank)
    assert otoedit.main(["check", str(violating_bank)]) == 0


def test_set_execute(voicebank_dir):
    assert otoedit.main(["set", str(voicebank_dir), "- か", "--preutter", "120", "-x"]) == 0
    assert "ka.wav=- か,50,40,100,70,10" in _oto(voicebank_dir)


def test_set_negative_offset_is_clamped(voicebank_dir):
    assert otoedit.main(["set", str(voicebank_dir), "- a", "--offset", "-50", "-x"]) == 0
    assert "a.wav=- a,0,180,-400,160,120" in _oto(voicebank_dir)


def test_set_unknown_alias(voicebank_dir):
    assert otoedit.main(["set", str(voicebank_dir), "nope", "--offset", "1"]) == 1


def test_set_requires_a_field(voicebank_dir):
    with pytest.raises(SystemExit):
        otoedit.main(["set", str(voicebank_dir), "- a"])


def test_missing_directory(tmp_path):
    assert otoedit.main(["list", str(tmp_path / "nope")]) == 1


def test_preset_and_encoding(voicebank_dir, tmp_path):
    preset = tmp_path / "p.json"
    preset.write_text('{"schema_version": "1.0", "mel_bands": 0}', encoding="utf-8")
    assert otoedit.main(["--preset", str(preset), "list", str(voicebank_dir)]) == 1
    assert otoedit.main(["--encoding", "bogus-codec", "list", str(voicebank_dir)]) == 1
    assert otoedit.main(["--encoding", "cp932", "list", str(voicebank_dir)]) == 0


def test_save_preset_writes_effective_settings(voicebank_dir, tmp_path):
    out = tmp_path / "presets" / "bank.json"
    argv = ["--encoding", "cp932", "--save-preset", str(out), "list", str(voicebank_dir)]
    assert otoedit.main(argv) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["text_encoding"] == "cp932"
    assert "mel_bands" not in data
    assert otoedit.main(["--preset", str(out), "list", str(voicebank_dir)]) == 0


def test_list_header_shows_character_info(voicebank_dir, capsys):
    (voicebank_dir / "character.txt").write_bytes("name=テト\r\nauthor=Twindrill\r\n".encode("shift_jis"))
    assert otoedit.main(["list", str(voicebank_dir)]) == 0
    out = capsys.readouterr().out
    assert "Author: Twindrill" in out
    assert "Character: テト" in out
