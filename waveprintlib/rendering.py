"""Waveform rendering: overview triples to an RGB raster."""

from __future__ import annotations

import logging
from typing import Sequence

from PIL import Image, ImageDraw

from .models import DrawCommand, OverviewTriple, RenderResult, WaveformTheme

log = logging.getLogger(__name__)

# Amplitudes are always scaled as signed 16-bit, whatever the bit depth.
AMPLITUDE_MIN = -32768
AMPLITUDE_MAX = 32767
AMPLITUDE_OFFSET = 32768
AMPLITUDE_SPAN = 65536

# Audacity-like palette for the line theme
WAVEFORM_COLOR = (63, 77, 155)
RMS_COLOR = (121, 128, 225)

DOT_PEAK_COLOR = (255, 255, 0)
DOT_RMS_COLOR = (255, 0, 255)

BACKGROUND_COLOR = (0, 0, 0)


def parse_theme(name: str | WaveformTheme) -> WaveformTheme:
    """Return the theme for a case-insensitive name (``line`` / ``dot``)."""
    if isinstance(name, WaveformTheme):
        return name
    try:
        return WaveformTheme(str(name).strip().lower())
    except ValueError:
        opts = ", ".join(t.value for t in WaveformTheme)
        raise ValueError(f"Unknown waveform theme {name!r} (expected one of {opts})")


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def normalize_triple(triple: OverviewTriple) -> tuple[int, int, float]:
    """Clamp to the signed 16-bit range and shift into ``[0, 65535]``."""
    min_off = int(_clamp(triple.min, AMPLITUDE_MIN, AMPLITUDE_MAX)) + AMPLITUDE_OFFSET
    max_off = int(_clamp(triple.max, AMPLITUDE_MIN, AMPLITUDE_MAX)) + AMPLITUDE_OFFSET
    rms_off = float(_clamp(triple.rms, float(AMPLITUDE_MIN), float(AMPLITUDE_MAX))) \
        + float(AMPLITUDE_OFFSET)
    return min_off, max_off, rms_off


def column_geometry(triple: OverviewTriple,
                    height: int) -> tuple[int, int, float, float]:
    """Vertical positions for one column (y grows downward).

    Returns ``(low_y, high_y, rms_y, low_rms_y)``.  ``low_y`` / ``high_y``
    use integer division; the RMS band is mirrored around the centre.
    """
    min_off, max_off, rms_off = normalize_triple(triple)
    low_y = height - min_off * height // AMPLITUDE_SPAN
    high_y = height - max_off * height // AMPLITUDE_SPAN
    rms_y = height - rms_off * height / AMPLITUDE_SPAN
    low_rms_y = height - rms_y
    return low_y, high_y, rms_y, low_rms_y


def plan_column(x: int, triple: OverviewTriple, height: int,
                theme: WaveformTheme) -> list[DrawCommand]:
    """Drawing commands for column *x* under *theme*."""
    low_y, high_y, rms_y, low_rms_y = column_geometry(triple, height)
    rms_row = int(rms_y)
    low_rms_row = int(low_rms_y)

    if theme is WaveformTheme.LINE:
        return [
            DrawCommand("line", x, low_y, high_y, WAVEFORM_COLOR),
            DrawCommand("line", x, low_rms_row, rms_row, RMS_COLOR),
        ]
    if theme is WaveformTheme.DOT:
        return [
            DrawCommand("point", x, low_y, low_y, DOT_PEAK_COLOR),
            DrawCommand("point", x, high_y, high_y, DOT_PEAK_COLOR),
            DrawCommand("point", x, low_rms_row, low_rms_row, DOT_RMS_COLOR),
            DrawCommand("point", x, rms_row, rms_row, DOT_RMS_COLOR),
        ]
    raise ValueError(f"Unsupported waveform theme: {theme!r}")


def _apply(draw: ImageDraw.ImageDraw, cmd: DrawCommand) -> None:
    if cmd.kind == "line":
        draw.line([(cmd.x, cmd.y0), (cmd.x, cmd.y1)], fill=cmd.color)
    elif cmd.kind == "point":
        draw.point((cmd.x, cmd.y0), fill=cmd.color)
    else:
        raise ValueError(f"Unknown draw command: {cmd.kind!r}")


def render(
    overview: Sequence[OverviewTriple],
    image_width: int,
    image_height: int,
    theme: WaveformTheme | str = WaveformTheme.LINE,
) -> RenderResult:
    """Draw one column per overview triple onto a fresh black canvas.

    Columns are drawn left to right.  When the overview runs out before
    *image_width* columns, drawing stops, the remaining columns keep the
    background colour and ``insufficient_data`` is set on the result.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(
            f"image size must be positive, got {image_width}x{image_height}"
        )
    theme = parse_theme(theme)

    image = Image.new("RGB", (image_width, image_height), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(image)
    result = RenderResult(image=image)

    for x in range(image_width):
        if x == len(overview):
            log.error("There is not enough samples! %d of %d columns drawn.",
                      x, image_width)
            result.insufficient_data = True
            break
        for cmd in plan_column(x, overview[x], image_height, theme):
            _apply(draw, cmd)
            result.commands.append(cmd)
        result.columns_drawn = x + 1

    return result


def save_image(result: RenderResult, path: str) -> None:
    """Encode the rendered canvas; the format follows the file extension."""
    result.image.save(path)
    log.info("The waveform image has been created: '%s'", path)
