from __future__ import annotations

import json
import logging
import os
from typing import Any

from .models import OverviewTriple, SummaryRecord

log = logging.getLogger(__name__)

SUMMARY_FIELDS = (
    "source_file",
    "sample_rate",
    "bits",
    "samples_per_pixel",
    "time_duration",
    "processed_time_duration",
    "samples_length",
    "samples",
)


def summary_to_dict(summary: SummaryRecord) -> dict[str, Any]:
    """JSON-ready representation of *summary*."""
    return {
        "source_file": summary.source_file,
        "sample_rate": summary.sample_rate,
        "bits": summary.bits,
        "samples_per_pixel": summary.samples_per_pixel,
        "time_duration": summary.time_duration,
        "processed_time_duration": summary.processed_time_duration,
        "samples_length": summary.samples_length,
        "samples": [t.to_dict() for t in summary.samples],
    }


def summary_from_dict(data: dict[str, Any]) -> SummaryRecord:
    missing = [k for k in SUMMARY_FIELDS if k not in data]
    if missing:
        raise ValueError(f"Summary is missing fields: {', '.join(missing)}")
    return SummaryRecord(
        source_file=str(data["source_file"]),
        sample_rate=int(data["sample_rate"]),
        bits=int(data["bits"]),
        samples_per_pixel=int(data["samples_per_pixel"]),
        time_duration=float(data["time_duration"]),
        processed_time_duration=float(data["processed_time_duration"]),
        samples_length=int(data["samples_length"]),
        samples=[OverviewTriple.from_dict(s) for s in data["samples"]],
    )


def save_json(summary: SummaryRecord, output_path: str) -> None:
    """Write the summary document for automation tools."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(summary_to_dict(summary), f)
    log.debug("The summary has been written to '%s'.", output_path)


def load_json(path: str) -> SummaryRecord:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Summary file must contain a JSON object, got {type(data).__name__}")
    return summary_from_dict(data)


def build_output_stem(prefix: str, image_width: int, samples_per_pixel: int,
                      coverage_percent: int) -> str:
    """Shared file stem of the JSON summary and the image.

    e.g. ``out/song-w1335-z33-per100``
    """
    return f"{prefix}-w{image_width}-z{samples_per_pixel}-per{coverage_percent}"


def output_prefix(output_path: str) -> str:
    """Strip the extension from a requested output file name."""
    return os.path.splitext(output_path)[0]
