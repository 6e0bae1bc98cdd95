"""Envelope extraction: window selection and min/max/RMS reduction."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .models import OverviewTriple, SampleWindow, SummaryRecord

log = logging.getLogger(__name__)


class EnvelopeError(ValueError):
    """Base class for conditions that abort extraction."""
    pass


class InvalidWindowError(EnvelopeError):
    """The resolved start sample is not before the resolved end sample."""
    pass


class ConflictingZoomAndEndError(EnvelopeError):
    """An explicit bucket size and an explicit end time were both given."""
    pass


class EmptyResultError(EnvelopeError):
    """The selected window is shorter than one bucket."""
    pass


# ---------------------------------------------------------------------------
# Window and bucket arithmetic
# ---------------------------------------------------------------------------

def resolve_window(
    total_samples: int,
    sample_rate: int,
    start_time: float = 0.0,
    end_time: float | None = None,
) -> tuple[int, int]:
    """Map a time window to absolute sample indices ``[start, end)``.

    ``end`` is capped at *total_samples*.  Raises
    :class:`InvalidWindowError` when ``start >= end``.
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    if start_time < 0:
        raise InvalidWindowError(f"start time must be >= 0, got {start_time}")
    if end_time is not None and end_time < 0:
        raise InvalidWindowError(f"end time must be >= 0, got {end_time}")

    start = int(start_time * sample_rate)
    if end_time is None:
        end = int(total_samples)
    else:
        end = min(int(total_samples), int(end_time * sample_rate))

    if start >= end:
        raise InvalidWindowError(
            f"empty sample window: start sample {start} >= end sample {end} "
            f"(start={start_time}s, end={end_time}s, {total_samples} samples)"
        )
    return start, end


def derive_bucket_size(selected_samples: int, image_width: int) -> int:
    """Samples per pixel that spread *selected_samples* over the width."""
    if image_width <= 0:
        raise ValueError(f"image_width must be positive, got {image_width}")
    return max(1, int(selected_samples) // int(image_width))


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------

def _bucket_rms(blocks: np.ndarray) -> np.ndarray:
    """Per-row RMS of a (count, bucket_size) block, in float32.

    Squares are summed left to right (cumsum, not the pairwise np.sum)
    and the mean and square root stay in float32.
    """
    values = blocks.astype(np.float32)
    sqr_sums = np.cumsum(values * values, axis=1, dtype=np.float32)[:, -1]
    return np.sqrt(sqr_sums / np.float32(blocks.shape[1]), dtype=np.float32)


def compute_rms(samples: Sequence[int] | np.ndarray) -> float:
    """Population RMS of raw sample values, as a float32 value."""
    data = np.asarray(samples, dtype=np.int64).ravel()
    if data.size == 0:
        return 0.0
    return float(_bucket_rms(data.reshape(1, -1))[0])


def reduce_overview(
    window_samples: Sequence[int] | np.ndarray,
    bucket_size: int,
) -> list[OverviewTriple]:
    """Fold consecutive buckets of *bucket_size* samples into triples.

    Min and max start at 0 for every bucket, so an all-positive bucket
    reports ``min == 0`` and an all-negative bucket ``max == 0``.
    Remainder samples that do not fill a bucket are dropped.
    """
    if bucket_size <= 0:
        raise ValueError(f"bucket_size must be positive, got {bucket_size}")

    data = np.asarray(window_samples, dtype=np.int64).ravel()
    count = data.size // bucket_size
    if count == 0:
        return []

    blocks = data[:count * bucket_size].reshape(count, bucket_size)
    mins = np.minimum(blocks.min(axis=1), 0)
    maxs = np.maximum(blocks.max(axis=1), 0)

    rms = _bucket_rms(blocks)

    return [
        OverviewTriple(min=int(lo), max=int(hi), rms=float(r))
        for lo, hi, r in zip(mins, maxs, rms)
    ]


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def extract(
    samples: Sequence[int] | np.ndarray,
    sample_rate: int,
    bit_depth: int,
    start_time: float = 0.0,
    end_time: float | None = None,
    bucket_size: int = 0,
    *,
    image_width: int,
    source_file: str = "",
    channels: int = 1,
) -> SummaryRecord:
    """Reduce a sample window to one overview triple per pixel column.

    Parameters
    ----------
    samples : sequence of int
        The whole decoded sample sequence.
    sample_rate, bit_depth : int
        Carried into the summary; *sample_rate* also converts times to
        sample indices.
    start_time, end_time : float
        Window bounds in seconds.  ``end_time=None`` selects to the end.
    bucket_size : int
        Samples per pixel.  ``0`` derives it from *image_width*.  Must not
        be combined with an explicit *end_time*.
    image_width : int
        Target image width in pixels.
    channels : int
        Channel count of the interleaved sequence.  Only the reported
        durations are divided by it; window indices stay interleaved.

    Raises
    ------
    ConflictingZoomAndEndError, InvalidWindowError, EmptyResultError
    """
    if bucket_size < 0:
        raise ValueError(f"bucket_size must be >= 0, got {bucket_size}")
    if image_width <= 0:
        raise ValueError(f"image_width must be positive, got {image_width}")
    if channels <= 0:
        raise ValueError(f"channels must be positive, got {channels}")
    if bucket_size > 0 and end_time is not None:
        raise ConflictingZoomAndEndError(
            "zoom and end time cannot be specified at the same time"
        )

    data = np.asarray(samples)
    total_samples = int(data.size)
    start, end = resolve_window(total_samples, sample_rate, start_time, end_time)
    selected = end - start

    if bucket_size == 0:
        log.warning("No zoom specified, the whole window will be drawn.")
        bucket_size = derive_bucket_size(selected, image_width)
        log.debug(
            "Samples per pixel derived from image width %d px: %d",
            image_width, bucket_size,
        )

    overview = reduce_overview(data[start:end], bucket_size)
    if not overview:
        raise EmptyResultError(
            f"window of {selected} samples is shorter than one bucket "
            f"of {bucket_size} samples"
        )

    frame_rate = sample_rate * channels
    total_duration = total_samples / frame_rate
    selected_duration = selected / frame_rate
    rendered_duration = selected_duration / len(overview) * image_width
    log.debug(
        "Processed time duration is %.3f s / overall time is %.3f s",
        rendered_duration, total_duration,
    )

    return SummaryRecord(
        source_file=source_file,
        sample_rate=int(sample_rate),
        bits=int(bit_depth),
        samples_per_pixel=int(bucket_size),
        time_duration=total_duration,
        processed_time_duration=rendered_duration,
        samples_length=len(overview),
        samples=overview,
    )


def extract_window(
    samples: Sequence[int] | np.ndarray,
    window: SampleWindow,
    bucket_size: int = 0,
    *,
    image_width: int,
    source_file: str = "",
    channels: int = 1,
) -> SummaryRecord:
    """:func:`extract` driven by a :class:`SampleWindow`."""
    return extract(
        samples,
        window.sample_rate,
        window.bit_depth,
        window.start_time,
        window.end_time,
        bucket_size,
        image_width=image_width,
        source_file=source_file,
        channels=channels,
    )
