from __future__ import annotations

import codecs
import json
import os
from dataclasses import dataclass
from typing import Any, Callable

PRESET_SCHEMA_VERSION = "1.0"

# Keys a preset file carries that are not editor parameters.
_PRESET_META = ("schema_version", "_description")


class ConfigError(Exception):
    """Raised when an editor configuration or preset is unusable."""


@dataclass
class ConfigFieldError:
    """One rejected parameter: its key, the value given, and why."""
    key: str
    value: Any
    message: str


def _known_encoding(value: str) -> str | None:
    try:
        codecs.lookup(value)
    except LookupError:
        return "is not a known text encoding"
    return None


@dataclass(frozen=True)
class ParamSpec:
    """One editor parameter with its default and the values it accepts.

    ``check`` is an optional extra rule run after the type, choice and
    range tests; it returns a message fragment for a bad value, else None.
    """
    key: str
    type: type | tuple
    default: Any
    label: str
    description: str = ""
    min: float | int | None = None
    max: float | int | None = None
    min_exclusive: bool = False
    choices: tuple | None = None
    check: Callable[[Any], str | None] | None = None

    def problem(self, value: Any) -> str | None:
        """Why *value* is not acceptable for this parameter, or None."""
        # bool is an int subclass but never a valid number here
        if isinstance(value, bool) and self.type is not bool:
            return f"must be {self.type_name}, got boolean"
        if not isinstance(value, self.type):
            return f"must be {self.type_name}, got {type(value).__name__}"
        if self.choices is not None and value not in self.choices:
            return "must be one of " + ", ".join(repr(c) for c in self.choices)
        if isinstance(value, (int, float)):
            if self.min is not None:
                if self.min_exclusive and value <= self.min:
                    return f"must be greater than {self.min}"
                if value < self.min:
                    return f"must be at least {self.min}"
            if self.max is not None and value > self.max:
                return f"must be at most {self.max}"
        if self.check is not None:
            return self.check(value)
        return None

    @property
    def type_name(self) -> str:
        if isinstance(self.type, tuple):
            return " or ".join(t.__name__ for t in self.type)
        return self.type.__name__


EDITOR_PARAMS: list[ParamSpec] = [
    ParamSpec("fft_size", int, 1024, "FFT size", min=64,
              description="Frame and FFT length of the mel spectrogram (samples)."),
    ParamSpec("mel_bands", int, 80, "Mel bands", min=1,
              description="Triangular mel filters between 0 Hz and Nyquist."),
    ParamSpec("frame_rate_hz", int, 400, "Frame rate (Hz)", min=1,
              description="Spectral frames per second. The hop is sample rate // "
                          "frame rate, and one plot x unit is one hop."),
    ParamSpec("log_floor", (int, float), 1e-4, "Log floor", min=0.0, min_exclusive=True,
              description="Band energies are clamped to this before the log."),
    ParamSpec("window", str, "hann", "Window",
              choices=("hann", "hamming", "blackman"),
              description="Analysis window of each spectrogram frame."),
    ParamSpec("text_encoding", str, "shift_jis", "Catalog encoding", check=_known_encoding,
              description="Text encoding of oto.ini files."),
    ParamSpec("max_workers", int, 1, "Spectrogram workers", min=1, max=8,
              description="Threads computing spectrograms in the background."),
    ParamSpec("colormap", str, "magma", "Spectrogram colormap",
              choices=("magma", "viridis", "grayscale")),
]


def default_config() -> dict[str, Any]:
    return {p.key: p.default for p in EDITOR_PARAMS}


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Overlay *configs* in order; later dicts win."""
    merged: dict[str, Any] = {}
    for cfg in configs:
        merged.update(cfg)
    return merged


def validate_param_values(
    params: list[ParamSpec],
    values: dict[str, Any],
) -> list[ConfigFieldError]:
    """Check the keys of *values* that *params* know about.

    Absent keys are fine; they fall back to the defaults.
    """
    errors = []
    for spec in params:
        if spec.key in values:
            value = values[spec.key]
            problem = spec.problem(value)
            if problem:
                errors.append(ConfigFieldError(spec.key, value, f"{spec.label} {problem}."))
    return errors


def validate_config(config: dict[str, Any]) -> None:
    """Raise :class:`ConfigError` naming every bad editor parameter."""
    errors = validate_param_values(EDITOR_PARAMS, config)
    if errors:
        raise ConfigError("Invalid editor configuration:\n" +
                          "\n".join(f"  - {e.message}" for e in errors))


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

def load_preset(path: str) -> dict[str, Any]:
    """Read a JSON preset and return the parameters it overrides.

    A preset from another major schema version is refused rather than
    half-applied.  Values are not validated here; merge them over the
    defaults and run :func:`validate_config`.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        raise ConfigError(f"Preset file not found: {path}") from None
    except OSError as e:
        raise ConfigError(f"Cannot read preset {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Preset {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Preset {path} must hold a JSON object, not {type(data).__name__}")

    version = str(data.get("schema_version", PRESET_SCHEMA_VERSION))
    if version.partition(".")[0] != PRESET_SCHEMA_VERSION.partition(".")[0]:
        raise ConfigError(f"Preset {path} uses schema {version}, "
                          f"this version reads {PRESET_SCHEMA_VERSION}")
    return {k: v for k, v in data.items() if k not in _PRESET_META}


def save_preset(config: dict[str, Any], path: str, *, description: str | None = None) -> None:
    """Write the parameters of *config* that differ from the defaults."""
    defaults = default_config()
    overrides = {k: v for k, v in config.items()
                 if not k.startswith("_") and defaults.get(k, object()) != v}
    preset: dict[str, Any] = {"schema_version": PRESET_SCHEMA_VERSION}
    if description:
        preset["_description"] = description
    preset.update(overrides)

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(preset, f, indent=4, ensure_ascii=False)
