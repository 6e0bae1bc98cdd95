from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

import numpy as np


class WaveformTheme(Enum):
    LINE = "line"
    DOT = "dot"


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero.

    ``Decimal(value)`` is the exact binary value, so no tie is invented
    by adding 0.5 in floating point.
    """
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class OverviewTriple:
    """Envelope of one bucket of samples, drawn as one pixel column."""
    min: int
    max: int
    rms: float

    def to_dict(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max, "rms": self.rms}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OverviewTriple:
        return cls(min=int(data["min"]), max=int(data["max"]),
                   rms=float(data["rms"]))


@dataclass(frozen=True)
class SampleWindow:
    """Time selection over a sample sequence.

    Attributes:
        sample_rate: Samples per second of the linear sequence.
        bit_depth:   Carried through to the summary; not used for scaling.
        start_time:  Window start in seconds (>= 0).
        end_time:    Window end in seconds, or None for end-of-file.
    """
    sample_rate: int
    bit_depth: int
    start_time: float = 0.0
    end_time: float | None = None


@dataclass
class SummaryRecord:
    source_file: str
    sample_rate: int
    bits: int
    samples_per_pixel: int
    time_duration: float
    processed_time_duration: float
    samples_length: int
    samples: list[OverviewTriple] = field(default_factory=list)

    @property
    def coverage_percent(self) -> int:
        """Share of the file represented by the image width, in percent."""
        if self.time_duration <= 0:
            return 0
        ratio = self.processed_time_duration / self.time_duration * 100.0
        return round_half_away_from_zero(ratio)


@dataclass
class DecodedAudio:
    """PCM samples as handed to the extractor.

    ``samples`` is a 1-D int32 array in the file's native integer range;
    multi-channel frames are kept interleaved.
    """
    source_file: str
    samples: np.ndarray
    sample_rate: int
    bit_depth: int
    channels: int
    subtype: str


@dataclass(frozen=True)
class DrawCommand:
    kind: str                      # "line" or "point"
    x: int
    y0: int
    y1: int
    color: tuple[int, int, int]


@dataclass
class RenderResult:
    image: Any                     # PIL.Image.Image
    commands: list[DrawCommand] = field(default_factory=list)
    columns_drawn: int = 0
    insufficient_data: bool = False


@dataclass
class PipelineResult:
    audio: DecodedAudio
    summary: SummaryRecord
    render: RenderResult
    json_path: str
    image_path: str
