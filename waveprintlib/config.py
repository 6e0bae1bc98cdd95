from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable

PRESET_SCHEMA_VERSION = "1.0"

# preset bookkeeping keys, never part of the config itself
_PRESET_META_KEYS = ("schema_version", "_description")


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class ConfigFieldError:
    """One invalid config value (``key``) and the reason it was rejected."""
    key: str
    value: Any
    message: str


@dataclass(frozen=True)
class ParamSpec:
    """One waveform option: its type, default and allowed range."""
    key: str
    type: type | tuple
    default: Any
    label: str
    description: str = ""
    min: float | int | None = None   # inclusive
    choices: list | None = None
    nullable: bool = False


PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="image_width", type=int, default=1335, min=1,
        label="Image width (px)",
        description="Width of the waveform image; one column per overview triple.",
    ),
    ParamSpec(
        key="image_height", type=int, default=220, min=1,
        label="Image height (px)",
    ),
    ParamSpec(
        key="samples_per_pixel", type=int, default=0, min=0,
        label="Zoom (samples per pixel)",
        description=(
            "Number of consecutive samples folded into one column. "
            "0 spreads the selected window over the image width. "
            "Cannot be combined with an end time."
        ),
    ),
    ParamSpec(
        key="start_time", type=(int, float), default=0, min=0,
        label="Start time (s)",
    ),
    ParamSpec(
        key="end_time", type=(int, float), default=None, min=0,
        nullable=True,
        label="End time (s)",
        description="End of the selected window. Empty selects to the end of the file.",
    ),
    ParamSpec(
        key="theme", type=str, default="line",
        choices=["line", "dot"],
        label="Waveform theme",
        description=(
            "'line' draws peak and RMS bars, "
            "'dot' marks only the peak and RMS boundaries."
        ),
    ),
]

_PARAMS_BY_KEY = {p.key: p for p in PARAMS}


def default_config() -> dict[str, Any]:
    """Returns the built-in default configuration."""
    return {p.key: p.default for p in PARAMS}


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge multiple config dicts left-to-right. Later values override earlier ones."""
    result: dict[str, Any] = {}
    for cfg in configs:
        result.update(cfg)
    return result


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

def load_preset(path: str) -> dict[str, Any]:
    """Read a JSON preset and return the waveform options it sets.

    Raises ConfigError for a missing or unreadable file, for anything
    other than a JSON object, and for keys that are not waveform options.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Preset file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in preset file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read preset file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Preset file must contain a JSON object, got {type(data).__name__}")

    preset = {k: v for k, v in data.items() if k not in _PRESET_META_KEYS}
    unknown = sorted(k for k in preset if k not in _PARAMS_BY_KEY)
    if unknown:
        raise ConfigError(
            f"Unknown option(s) in preset file {path}: {', '.join(unknown)}"
        )
    return preset


def save_preset(config: dict[str, Any], path: str, *, description: str | None = None) -> None:
    """Write the waveform options of *config* that differ from the defaults."""
    preset: dict[str, Any] = {"schema_version": PRESET_SCHEMA_VERSION}
    if description:
        preset["_description"] = description

    for spec in PARAMS:
        if spec.key in config and config[spec.key] != spec.default:
            preset[spec.key] = config[spec.key]

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(preset, f, indent=4, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_value(spec: ParamSpec, value: Any) -> str | None:
    """Reason *value* is not acceptable for *spec*, or None if it is."""
    if value is None:
        return None if spec.nullable else f"{spec.label} must not be empty."

    # bool is an int subclass, but True is not a width
    if isinstance(value, bool) or not isinstance(value, spec.type):
        got = "boolean" if isinstance(value, bool) else type(value).__name__
        return f"{spec.label} must be {_type_label(spec.type)}, got {got}."

    if spec.choices is not None and value not in spec.choices:
        opts = ", ".join(repr(c) for c in spec.choices)
        return f"{spec.label} must be one of {opts}."

    if spec.min is not None and value < spec.min:
        return f"{spec.label} must be at least {spec.min}."
    return None


def _check_zoom_and_end(config: dict[str, Any]) -> ConfigFieldError | None:
    zoom = config.get("samples_per_pixel")
    end = config.get("end_time")
    if isinstance(zoom, int) and zoom > 0 and end is not None:
        return ConfigFieldError(
            "end_time", end,
            "Zoom and end time cannot be specified at the same time.",
        )
    return None


# rules spanning more than one key; run once every field is valid
_CROSS_FIELD_RULES: list[Callable[[dict[str, Any]], ConfigFieldError | None]] = [
    _check_zoom_and_end,
]


def validate_config_fields(config: dict[str, Any]) -> list[ConfigFieldError]:
    """Validate a flat config dict against :data:`PARAMS`.

    Only keys present in *config* are checked; keys that are not waveform
    options are ignored.  Returns structured errors and never raises.
    """
    errors: list[ConfigFieldError] = []
    for key, value in config.items():
        spec = _PARAMS_BY_KEY.get(key)
        if spec is None:
            continue
        message = _check_value(spec, value)
        if message:
            errors.append(ConfigFieldError(key, value, message))

    if not errors:
        for rule in _CROSS_FIELD_RULES:
            error = rule(config)
            if error:
                errors.append(error)
    return errors


def validate_config(config: dict[str, Any]) -> None:
    """Validate a flat config dict.

    Raises :class:`ConfigError` listing every invalid field.
    """
    errors = validate_config_fields(config)
    if errors:
        lines = [e.message for e in errors]
        raise ConfigError(
            "Configuration has invalid values:\n  • " + "\n  • ".join(lines)
        )


def _type_label(t) -> str:
    if isinstance(t, tuple):
        return " or ".join(x.__name__ for x in t)
    return t.__name__
