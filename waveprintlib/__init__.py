from ._version import __version__
from .models import (
    WaveformTheme,
    OverviewTriple,
    SampleWindow,
    SummaryRecord,
    DecodedAudio,
    DrawCommand,
    RenderResult,
    PipelineResult,
)
from .envelope import (
    extract,
    extract_window,
    resolve_window,
    derive_bucket_size,
    compute_rms,
    reduce_overview,
    EnvelopeError,
    InvalidWindowError,
    ConflictingZoomAndEndError,
    EmptyResultError,
)
from .rendering import render, save_image, parse_theme
from .audio import load_pcm, AudioFormatError
from .pipeline import Pipeline
from .config import (
    default_config,
    merge_configs,
    validate_config,
    validate_config_fields,
    load_preset,
    save_preset,
    ConfigError,
    ConfigFieldError,
    ParamSpec,
    PARAMS,
)
from .reports import save_json, load_json
from .events import EventBus

__all__ = [
    "__version__",
    "WaveformTheme",
    "OverviewTriple",
    "SampleWindow",
    "SummaryRecord",
    "DecodedAudio",
    "DrawCommand",
    "RenderResult",
    "PipelineResult",
    "extract",
    "extract_window",
    "resolve_window",
    "derive_bucket_size",
    "compute_rms",
    "reduce_overview",
    "EnvelopeError",
    "InvalidWindowError",
    "ConflictingZoomAndEndError",
    "EmptyResultError",
    "render",
    "save_image",
    "parse_theme",
    "load_pcm",
    "AudioFormatError",
    "Pipeline",
    "default_config",
    "merge_configs",
    "validate_config",
    "validate_config_fields",
    "load_preset",
    "save_preset",
    "ConfigError",
    "ConfigFieldError",
    "ParamSpec",
    "PARAMS",
    "save_json",
    "load_json",
    "EventBus",
]
