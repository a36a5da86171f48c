# Narrative package - deterministic scene/climate rules feeding the scriptwriter

from shortforge.narrative.types import (
    ShortFormat,
    NarrativePressure,
    EmotionalState,
    RevelationDynamic,
    HookType,
    ClosingType,
)
from shortforge.narrative.resolve import resolve
from shortforge.narrative.scene_calculator import (
    FORMAT_CONFIG,
    PRESSURE_MULTIPLIER,
    SceneParams,
    calculate_scene_params,
    validate_overrides,
    format_limits,
)
from shortforge.narrative.guard_rails import (
    VALID_COMBINATIONS,
    ClimateConfig,
    GuardRailResult,
    validate_climate,
)
from shortforge.narrative.payload_builder import ScriptwriterPayload, build_scriptwriter_payload

__all__ = [
    "ShortFormat",
    "NarrativePressure",
    "EmotionalState",
    "RevelationDynamic",
    "HookType",
    "ClosingType",
    "resolve",
    "FORMAT_CONFIG",
    "PRESSURE_MULTIPLIER",
    "SceneParams",
    "calculate_scene_params",
    "validate_overrides",
    "format_limits",
    "VALID_COMBINATIONS",
    "ClimateConfig",
    "GuardRailResult",
    "validate_climate",
    "ScriptwriterPayload",
    "build_scriptwriter_payload",
]
