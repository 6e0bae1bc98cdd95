"""Tests for ParamSpec-driven config validation and presets."""

import json

import pytest

from waveprintlib.config import (
    ConfigError,
    default_config,
    load_preset,
    merge_configs,
    save_preset,
    validate_config,
    validate_config_fields,
)


def test_defaults():
    cfg = default_config()
    assert cfg == {
        "image_width": 1335,
        "image_height": 220,
        "samples_per_pixel": 0,
        "start_time": 0,
        "end_time": None,
        "theme": "line",
    }
    assert validate_config_fields(cfg) == []


@pytest.mark.parametrize("key,value", [
    ("image_width", 0),
    ("image_height", -5),
    ("image_width", True),
    ("image_width", "800"),
    ("samples_per_pixel", -1),
    ("start_time", -0.5),
    ("end_time", -1),
    ("theme", "bars"),
    ("theme", None),
])
def test_invalid_values(key, value):
    errors = validate_config_fields({key: value})
    assert len(errors) == 1
    assert errors[0].key == key


def test_float_times_accepted():
    assert validate_config_fields({"start_time": 1.5, "end_time": 2}) == []


def test_validate_config_lists_every_field():
    with pytest.raises(ConfigError) as exc:
        validate_config({"image_width": 0, "theme": "bars"})
    msg = str(exc.value)
    assert "Image width" in msg
    assert "Waveform theme" in msg


def test_merge_later_wins():
    merged = merge_configs(default_config(), {"theme": "dot"}, {"image_width": 10})
    assert merged["theme"] == "dot"
    assert merged["image_width"] == 10
    assert merged["image_height"] == 220


def test_preset_keeps_only_changed_values(tmp_path):
    path = tmp_path / "presets" / "dots.json"
    cfg = merge_configs(default_config(), {"theme": "dot", "input": "a.wav"})
    save_preset(cfg, str(path), description="dot theme")
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    assert raw == {"schema_version": "1.0", "_description": "dot theme", "theme": "dot"}
    assert load_preset(str(path)) == {"theme": "dot"}


def test_preset_missing(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_preset(str(tmp_path / "nope.json"))


def test_preset_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_preset(str(path))


def test_preset_must_be_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError, match="JSON object"):
        load_preset(str(path))


def test_zoom_and_end_time_conflict():
    errors = validate_config_fields({"samples_per_pixel": 5, "end_time": 1})
    assert [e.key for e in errors] == ["end_time"]
    assert "cannot be specified at the same time" in errors[0].message
    assert validate_config_fields({"samples_per_pixel": 0, "end_time": 1}) == []
    assert validate_config_fields({"samples_per_pixel": 5, "end_time": None}) == []


def test_conflict_reported_after_field_errors():
    errors = validate_config_fields({"samples_per_pixel": -1, "end_time": 1})
    assert [e.key for e in errors] == ["samples_per_pixel"]


def test_unrelated_keys_ignored():
    assert validate_config_fields({"input": "a.wav", "log_level": "debug"}) == []


def test_preset_unknown_key_rejected(tmp_path):
    path = tmp_path / "typo.json"
    path.write_text(json.dumps({"schema_version": "1.0", "widht": 10}), encoding="utf-8")
    with pytest.raises(ConfigError, match="widht"):
        load_preset(str(path))
