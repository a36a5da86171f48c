"""
Scriptwriter Payload Builder
Assembles the single closed JSON document handed to the text-generation
service: style, climate, constraints and characters. Nothing else about the
job reaches the scriptwriter, so script generation is reproducible from the
payload alone.
"""

import logging
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from shortforge.narrative.guard_rails import validate_climate
from shortforge.narrative.resolve import resolve
from shortforge.narrative.scene_calculator import calculate_scene_params
from shortforge.narrative.types import ShortFormat
from shortforge.pipeline.base import PresetValidationError

logger = logging.getLogger(__name__)


class _PayloadModel(BaseModel):
    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class StyleSection(_PayloadModel):
    name: str
    hook_type: str
    hook_example: Optional[str] = None
    cta_type: str
    cta_example: Optional[str] = None
    script_function: Optional[str] = None
    narrator_posture: Optional[str] = None
    content_complexity: Optional[str] = None
    visual_prompt: str = ""
    script_instructions: str = ""


class ClimateSection(_PayloadModel):
    name: str
    emotional_state: str
    revelation_dynamic: str
    narrative_pressure: str
    hook_type: str
    closing_type: str
    custom_instructions: str = ""
    behavior_preview: str = ""


class ConstraintsSection(_PayloadModel):
    format: str
    max_scenes: int
    avg_scene_duration: float
    total_duration: float
    is_overridden: bool


class CharacterEntry(_PayloadModel):
    name: str
    description: str = ""
    visual_prompt: str = ""
    role: str = "character"


class ScriptwriterPayload(_PayloadModel):
    """The entire contract handed to the scriptwriter."""
    premise: str
    style: StyleSection
    climate: ClimateSection
    constraints: ConstraintsSection
    characters: List[CharacterEntry] = []

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def _field(obj: Any, name: str, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def build_scriptwriter_payload(
    premise: str,
    style: Any,
    climate: Any,
    format: ShortFormat = ShortFormat.SHORT,
    characters: Optional[Iterable[Any]] = None,
    scene_count: Optional[int] = None,
    avg_scene_duration: Optional[float] = None,
) -> ScriptwriterPayload:
    """
    Build the scriptwriter payload.

    Args:
        premise: The user's theme/premise text
        style: Style preset (ORM object or dict with snake_case keys)
        climate: Climate preset (ORM object or dict with snake_case keys)
        format: Target format, feeds the scene calculator
        characters: Roster entries with name/description/visual_prompt/role
        scene_count: Manual scene-count override
        avg_scene_duration: Manual scene-duration override

    Raises:
        PresetValidationError: If the style lacks hook_type or cta_type, or
            the climate lacks emotional_state
    """
    if style is None:
        raise PresetValidationError("A style preset is required to generate a script.")
    if climate is None:
        raise PresetValidationError("A climate preset is required to generate a script.")

    style_name = _field(style, "name", "")
    climate_name = _field(climate, "name", "")

    if not _field(style, "hook_type"):
        raise PresetValidationError(f'Style "{style_name}" has no hook_type defined.')
    if not _field(style, "cta_type"):
        raise PresetValidationError(f'Style "{style_name}" has no cta_type defined.')
    if not _field(climate, "emotional_state"):
        raise PresetValidationError(f'Climate "{climate_name}" has no emotional_state defined.')

    try:
        guard = validate_climate(
            emotional_state=_field(climate, "emotional_state"),
            revelation_dynamic=_field(climate, "revelation_dynamic"),
            narrative_pressure=_field(climate, "narrative_pressure"),
            hook_type=_field(climate, "hook_type"),
            closing_type=_field(climate, "closing_type"),
        )
    except ValueError as e:
        raise PresetValidationError(f'Climate "{climate_name}" is invalid: {e}')

    for warning in guard.warnings:
        logger.warning(f"[Payload] Climate '{climate_name}': {warning}")

    corrected = guard.corrected
    calculated = calculate_scene_params(format, corrected.narrative_pressure)

    max_scenes = resolve(scene_count, calculated.scene_count)
    scene_duration = resolve(avg_scene_duration, calculated.avg_scene_duration)

    constraints = ConstraintsSection(
        format=ShortFormat(format).value,
        max_scenes=max_scenes,
        avg_scene_duration=scene_duration,
        total_duration=max_scenes * scene_duration,
        is_overridden=scene_count is not None or avg_scene_duration is not None,
    )

    return ScriptwriterPayload(
        premise=premise,
        style=StyleSection(
            name=style_name,
            hook_type=_field(style, "hook_type"),
            hook_example=_field(style, "hook_example"),
            cta_type=_field(style, "cta_type"),
            cta_example=_field(style, "cta_example"),
            script_function=_field(style, "script_function"),
            narrator_posture=_field(style, "narrator_posture"),
            content_complexity=_field(style, "content_complexity"),
            visual_prompt=_field(style, "visual_prompt_base") or "",
            script_instructions=_field(style, "advanced_instructions") or "",
        ),
        climate=ClimateSection(
            name=climate_name,
            emotional_state=corrected.emotional_state.value,
            revelation_dynamic=corrected.revelation_dynamic.value,
            narrative_pressure=corrected.narrative_pressure.value,
            hook_type=corrected.hook_type.value,
            closing_type=corrected.closing_type.value,
            custom_instructions=_field(climate, "prompt_fragment") or "",
            behavior_preview=_field(climate, "behavior_preview") or "",
        ),
        constraints=constraints,
        characters=[
            CharacterEntry(
                name=_field(c, "name", ""),
                description=_field(c, "description") or "",
                visual_prompt=_field(c, "visual_prompt") or "",
                role=_field(c, "role") or "character",
            )
            for c in (characters or [])
        ],
    )
