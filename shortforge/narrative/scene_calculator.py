"""
Scene Parameter Calculator
Maps (format, narrative pressure) to a scene count and average scene duration,
clamped to the per-format duration bounds.

Pure and deterministic: identical input always yields identical output.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from shortforge.narrative.types import ShortFormat, NarrativePressure


@dataclass(frozen=True)
class FormatConfig:
    """Fixed duration bounds of a target format (seconds)."""
    min_duration: int
    max_duration: int
    default_duration: int
    base_scenes: int
    min_scene_duration: int
    max_scene_duration: int
    default_scene_duration: int

    @property
    def max_scenes_limit(self) -> float:
        """Upper bound for a manual scene-count override."""
        return self.base_scenes * 2.5


FORMAT_CONFIG: Dict[ShortFormat, FormatConfig] = {
    ShortFormat.SHORT: FormatConfig(
        min_duration=15, max_duration=60, default_duration=30, base_scenes=4,
        min_scene_duration=3, max_scene_duration=10, default_scene_duration=5,
    ),
    ShortFormat.REEL: FormatConfig(
        min_duration=30, max_duration=90, default_duration=60, base_scenes=6,
        min_scene_duration=5, max_scene_duration=12, default_scene_duration=8,
    ),
    ShortFormat.LONG: FormatConfig(
        min_duration=60, max_duration=180, default_duration=120, base_scenes=10,
        min_scene_duration=8, max_scene_duration=15, default_scene_duration=10,
    ),
    ShortFormat.YOUTUBE: FormatConfig(
        min_duration=180, max_duration=600, default_duration=300, base_scenes=20,
        min_scene_duration=10, max_scene_duration=20, default_scene_duration=15,
    ),
}

# Fewer, longer scenes when contemplative; more, shorter scenes when urgent
PRESSURE_MULTIPLIER: Dict[NarrativePressure, float] = {
    NarrativePressure.SLOW: 0.7,
    NarrativePressure.FLUID: 1.0,
    NarrativePressure.FAST: 1.4,
}


@dataclass(frozen=True)
class SceneParams:
    """Calculator output."""
    scene_count: int
    avg_scene_duration: int
    total_duration: int

    def to_dict(self) -> dict:
        return {
            "sceneCount": self.scene_count,
            "avgSceneDuration": self.avg_scene_duration,
            "totalDuration": self.total_duration,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_scene_params(
    format: ShortFormat,
    pressure: Optional[NarrativePressure] = None,
) -> SceneParams:
    """
    Calculate scene count and average duration for a format.

    The base scene count is scaled by the pressure multiplier, then shrunk or
    grown so that ``scene_count * avg_scene_duration`` stays inside the
    format's [min_duration, max_duration] window.
    """
    config = FORMAT_CONFIG[ShortFormat(format)]
    multiplier = PRESSURE_MULTIPLIER[NarrativePressure(pressure or NarrativePressure.FLUID)]

    scene_count = _round_half_up(config.base_scenes * multiplier)
    avg_duration = config.default_scene_duration
    total = scene_count * avg_duration

    if total > config.max_duration:
        scene_count = config.max_duration // avg_duration
    elif total < config.min_duration:
        scene_count = math.ceil(config.min_duration / avg_duration)

    scene_count = max(1, scene_count)

    return SceneParams(
        scene_count=scene_count,
        avg_scene_duration=avg_duration,
        total_duration=scene_count * avg_duration,
    )


def validate_overrides(
    format: ShortFormat,
    scene_count: Optional[int] = None,
    avg_scene_duration: Optional[float] = None,
) -> List[str]:
    """
    Check manual overrides against the format's soft limits.

    Returns human-readable warnings; never blocks. An empty list means the
    overrides are within the suggested bounds.
    """
    fmt = ShortFormat(format)
    config = FORMAT_CONFIG[fmt]
    warnings: List[str] = []

    if scene_count is not None:
        if scene_count < 1 or scene_count > config.max_scenes_limit:
            warnings.append(
                f"Suggested scene count for {fmt.value} is between 1 and "
                f"{_round_half_up(config.max_scenes_limit)}."
            )

    if avg_scene_duration is not None:
        if not config.min_scene_duration <= avg_scene_duration <= config.max_scene_duration:
            warnings.append(
                f"Scene duration for {fmt.value} should be between "
                f"{config.min_scene_duration}s and {config.max_scene_duration}s."
            )

    return warnings


def format_limits(format: ShortFormat) -> dict:
    """Scene and duration bounds for display next to override inputs."""
    config = FORMAT_CONFIG[ShortFormat(format)]
    return {
        "scenes": {
            "min": 1,
            "max": _round_half_up(config.max_scenes_limit),
            "suggested": config.base_scenes,
        },
        "duration": {
            "min": config.min_scene_duration,
            "max": config.max_scene_duration,
            "suggested": config.default_scene_duration,
        },
    }
