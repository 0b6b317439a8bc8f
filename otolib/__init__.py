from ._version import __version__
from .models import (
    CutoffKind,
    Cutoff,
    TimedSample,
    Voicebank,
    VoicebankInfo,
)
from .timing import TimingModel, repair_cutoff
from .coords import CoordinateMapper, ViewRange, hop_size
from .spectrogram import compute_mel_heatmap
from .pipeline import SpectrogramPipeline, SpectrogramResult
from .overlay import OverlayRenderer, Heatmap, Polyline, Rect, Line, Marker
from .editor import OtoEditor
from .controller import InputController, TIMING_KEYS, VIEW_KEYS
from .audio import WaveformDecodeError, decode_waveform, probe_duration_ms
from .catalog import CatalogError, load_timing_catalog, read_character_info, save_timing_catalog
from .config import (
    default_config,
    merge_configs,
    validate_config,
    validate_param_values,
    load_preset,
    save_preset,
    ConfigError,
    ConfigFieldError,
    ParamSpec,
    EDITOR_PARAMS,
)
from .events import EventBus, TIMING_CHANGED, SELECTION_CHANGED

__all__ = [
    "__version__",
    "CutoffKind",
    "Cutoff",
    "TimedSample",
    "Voicebank",
    "VoicebankInfo",
    "TimingModel",
    "repair_cutoff",
    "CoordinateMapper",
    "ViewRange",
    "hop_size",
    "compute_mel_heatmap",
    "SpectrogramPipeline",
    "SpectrogramResult",
    "OverlayRenderer",
    "Heatmap",
    "Polyline",
    "Rect",
    "Line",
    "Marker",
    "OtoEditor",
    "InputController",
    "TIMING_KEYS",
    "VIEW_KEYS",
    "WaveformDecodeError",
    "decode_waveform",
    "probe_duration_ms",
    "CatalogError",
    "load_timing_catalog",
    "save_timing_catalog",
    "read_character_info",
    "default_config",
    "merge_configs",
    "validate_config",
    "validate_param_values",
    "load_preset",
    "save_preset",
    "ConfigError",
    "ConfigFieldError",
    "ParamSpec",
    "EDITOR_PARAMS",
    "EventBus",
    "TIMING_CHANGED",
    "SELECTION_CHANGED",
]
