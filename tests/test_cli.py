"""Tests for the waveprint command line."""

import json
import logging

import pytest

import waveprint


def test_main_writes_outputs(tmp_path, write_wav, sine_16bit):
    wav = write_wav(sine_16bit)
    out = tmp_path / "render" / "song.png"
    code = waveprint.main(["-i", wav, "-o", str(out), "-w", "100", "-h", "40",
                           "-t", "DOT"])
    assert code == 0
    assert (tmp_path / "render" / "song-w100-z40-per100.png").is_file()
    assert (tmp_path / "render" / "song-w100-z40-per100.json").is_file()


def test_preset_supplies_defaults(tmp_path, write_wav, sine_16bit):
    preset = tmp_path / "preset.json"
    preset.write_text(json.dumps({"image_width": 80, "theme": "dot"}), encoding="utf-8")
    code = waveprint.main(["-i", write_wav(sine_16bit), "-o", str(tmp_path / "p.png"),
                           "--preset", str(preset), "-w", "50"])
    assert code == 0
    # command line wins over the preset
    assert (tmp_path / "p-w50-z80-per100.png").is_file()


def test_zoom_and_end_rejected():
    with pytest.raises(SystemExit) as exc:
        waveprint.parse_arguments(["-i", "a.wav", "-o", "b.png", "-z", "10", "-e", "3"])
    assert exc.value.code == 2


def test_preset_end_time_with_zoom_rejected(tmp_path, write_wav, sine_16bit):
    preset = tmp_path / "preset.json"
    preset.write_text(json.dumps({"end_time": 0.2}), encoding="utf-8")
    code = waveprint.main(["-i", write_wav(sine_16bit), "-o", str(tmp_path / "o.png"),
                           "--preset", str(preset), "-z", "10"])
    assert code == 1
    assert not list(tmp_path.glob("o-*"))


def test_only_given_options_override():
    args = waveprint.parse_arguments(["-i", "a.wav", "-o", "b.png", "-s", "1.5"])
    assert waveprint.cli_overrides(args) == {"start_time": 1.5}


def test_negative_start_rejected():
    with pytest.raises(SystemExit):
        waveprint.parse_arguments(["-i", "a.wav", "-o", "b.png", "-s", "-1"])


def test_missing_input(tmp_path):
    code = waveprint.main(["-i", str(tmp_path / "missing.wav"), "-o", str(tmp_path / "o.png")])
    assert code == 1


def test_invalid_window_reported(tmp_path, write_wav, sine_16bit):
    code = waveprint.main(["-i", write_wav(sine_16bit), "-o", str(tmp_path / "o.png"),
                           "-s", "5"])
    assert code == 1
    assert not list(tmp_path.glob("o-*"))


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv(waveprint.LOG_LEVEL_ENV, "debug")
    waveprint.setup_logging(None)
    assert logging.getLogger().level == logging.DEBUG
    waveprint.setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING
    monkeypatch.setenv(waveprint.LOG_LEVEL_ENV, "chatty")
    waveprint.setup_logging(None)
    assert logging.getLogger().level == logging.INFO
