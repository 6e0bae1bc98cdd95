from __future__ import annotations

import logging
import time
from typing import Any

from .audio import load_pcm
from .config import default_config, merge_configs, validate_config
from .envelope import extract
from .events import EventBus
from .models import DecodedAudio, PipelineResult, RenderResult, SummaryRecord
from .rendering import parse_theme, render, save_image
from .reports import build_output_stem, save_json

log = logging.getLogger(__name__)


class Pipeline:
    """decode -> extract -> summary JSON -> render -> image, in that order.

    Each stage runs to completion before the next one starts; any
    exception aborts the run.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        event_bus: EventBus | None = None,
    ):
        self.config = merge_configs(default_config(), config or {})
        validate_config(self.config)
        self.theme = parse_theme(self.config["theme"])
        self.event_bus = event_bus

    def _emit(self, event_type: str, **data):
        if self.event_bus:
            self.event_bus.emit(event_type, **data)

    @property
    def image_width(self) -> int:
        return self.config["image_width"]

    @property
    def image_height(self) -> int:
        return self.config["image_height"]

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def extract(self, audio: DecodedAudio) -> SummaryRecord:
        cfg = self.config
        summary = extract(
            audio.samples,
            audio.sample_rate,
            audio.bit_depth,
            cfg["start_time"],
            cfg["end_time"],
            cfg["samples_per_pixel"],
            image_width=self.image_width,
            source_file=audio.source_file,
            channels=audio.channels,
        )
        self._emit("extract.complete", summary=summary)
        return summary

    def render(self, summary: SummaryRecord) -> RenderResult:
        result = render(summary.samples, self.image_width, self.image_height,
                        self.theme)
        if result.insufficient_data:
            self._emit("render.insufficient_data",
                       columns_drawn=result.columns_drawn,
                       image_width=self.image_width)
        return result

    def run(self, source_path: str, output_prefix: str) -> PipelineResult:
        """Process one file; outputs share the stem built from *output_prefix*."""
        t0 = time.perf_counter()
        audio = load_pcm(source_path)
        t1 = time.perf_counter()
        log.debug("decoded %s: %d samples, %d Hz, %d bit, %d ch (%.1f ms)",
                  source_path, audio.samples.size, audio.sample_rate,
                  audio.bit_depth, audio.channels, (t1 - t0) * 1000)

        summary = self.extract(audio)
        t2 = time.perf_counter()
        log.debug("extracted %d columns at %d samples/px (%.1f ms)",
                  summary.samples_length, summary.samples_per_pixel,
                  (t2 - t1) * 1000)

        stem = build_output_stem(output_prefix, self.image_width,
                                 summary.samples_per_pixel,
                                 summary.coverage_percent)
        json_path = stem + ".json"
        save_json(summary, json_path)
        self._emit("summary.saved", path=json_path)

        result = self.render(summary)
        image_path = stem + ".png"
        save_image(result, image_path)
        t3 = time.perf_counter()
        log.debug("rendered %d columns (%.1f ms)", result.columns_drawn,
                  (t3 - t2) * 1000)
        self._emit("render.complete", path=image_path, result=result)

        return PipelineResult(
            audio=audio,
            summary=summary,
            render=result,
            json_path=json_path,
            image_path=image_path,
        )
