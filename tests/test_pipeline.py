"""End-to-end tests: WAV file in, JSON summary and PNG out."""

import os

import numpy as np
import pytest
from PIL import Image

from waveprintlib.config import ConfigError
from waveprintlib.envelope import InvalidWindowError
from waveprintlib.events import EventBus
from waveprintlib.pipeline import Pipeline
from waveprintlib.reports import load_json


@pytest.mark.smoke
def test_run_writes_summary_and_image(tmp_path, write_wav, sine_16bit):
    path = write_wav(sine_16bit)
    pipeline = Pipeline({"image_width": 100, "image_height": 50})
    result = pipeline.run(path, str(tmp_path / "out"))

    # 4000 samples / 100 px
    assert result.json_path == str(tmp_path / "out-w100-z40-per100.json")
    assert result.image_path == str(tmp_path / "out-w100-z40-per100.png")
    assert os.path.isfile(result.json_path)

    summary = load_json(result.json_path)
    assert summary.samples_length == 100
    assert summary.sample_rate == 8000
    assert summary.bits == 16
    assert summary.source_file == path
    assert max(t.max for t in summary.samples) <= 20000
    assert min(t.min for t in summary.samples) >= -20000

    with Image.open(result.image_path) as img:
        assert img.size == (100, 50)
    assert not result.render.insufficient_data


def test_events_in_order(tmp_path, write_wav, sine_16bit):
    seen = []
    bus = EventBus()
    for name in ("extract.complete", "summary.saved",
                 "render.insufficient_data", "render.complete"):
        bus.subscribe(name, lambda _name=name, **data: seen.append(_name))
    Pipeline({"image_width": 100}, event_bus=bus).run(
        write_wav(sine_16bit), str(tmp_path / "out"))
    assert seen == ["extract.complete", "summary.saved", "render.complete"]


def test_insufficient_data_is_reported(tmp_path, write_wav, sine_16bit):
    reports = []
    bus = EventBus()
    bus.subscribe("render.insufficient_data",
                  lambda **data: reports.append(data))
    pipeline = Pipeline({"image_width": 100, "samples_per_pixel": 100},
                        event_bus=bus)
    result = pipeline.run(write_wav(sine_16bit), str(tmp_path / "zoomed"))

    assert result.summary.samples_length == 40
    assert result.render.insufficient_data
    assert reports == [{"columns_drawn": 40, "image_width": 100}]
    # 0.5 s over 40 columns stretched to 100 px
    assert result.image_path.endswith("zoomed-w100-z100-per250.png")
    assert os.path.isfile(result.image_path)


def test_window_selection(tmp_path, write_wav, sine_16bit):
    pipeline = Pipeline({"image_width": 50, "start_time": 0.25, "end_time": 0.5})
    result = pipeline.run(write_wav(sine_16bit), str(tmp_path / "win"))
    # 2000 selected samples / 50 px
    assert result.summary.samples_per_pixel == 40
    assert result.summary.processed_time_duration == pytest.approx(0.25)
    assert result.summary.coverage_percent == 50


def test_zoom_with_end_time_conflicts():
    with pytest.raises(ConfigError, match="Zoom and end time"):
        Pipeline({"samples_per_pixel": 10, "end_time": 0.2})


def test_stereo_durations_are_in_seconds(tmp_path, write_wav, sine_16bit):
    stereo = np.column_stack([sine_16bit, sine_16bit])
    result = Pipeline({"image_width": 100}).run(write_wav(stereo), str(tmp_path / "st"))
    # 8000 interleaved samples, 4000 frames at 8 kHz
    assert result.summary.samples_per_pixel == 80
    assert result.summary.time_duration == pytest.approx(0.5)
    assert result.summary.processed_time_duration == pytest.approx(0.5)
    assert load_json(result.json_path).time_duration == pytest.approx(0.5)


def test_start_past_end_of_file(tmp_path, write_wav, sine_16bit):
    pipeline = Pipeline({"start_time": 10})
    with pytest.raises(InvalidWindowError):
        pipeline.run(write_wav(sine_16bit), str(tmp_path / "x"))


def test_invalid_config_rejected():
    with pytest.raises(ConfigError):
        Pipeline({"image_width": 0})
    with pytest.raises(ConfigError):
        Pipeline({"theme": "bars"})
