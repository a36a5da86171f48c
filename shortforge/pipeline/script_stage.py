"""
Script Stage
Asks the scriptwriter model for a scene-by-scene script built from the
closed scriptwriter payload, and normalizes scene ordering.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from shortforge.narrative.payload_builder import ScriptwriterPayload
from shortforge.pipeline.parsing import parse_script
from shortforge.services.model_registry import ModelRef

logger = logging.getLogger(__name__)


@dataclass
class ParsedScene:
    order: int
    duration: float
    narration: str
    visual_desc: str
    goal: Optional[str] = None


@dataclass
class ScriptResult:
    title: Optional[str]
    hook: Optional[str]
    cta: Optional[str]
    scenes: List[ParsedScene] = field(default_factory=list)
    raw: dict = field(default_factory=dict)


class ScriptStage:
    """Premise + presets -> ordered scenes."""

    SYSTEM_PROMPT = """You are a scriptwriter specialized in viral vertical shorts and reels.

You receive ONE JSON document describing everything you may use: the premise,
the narrative style, the emotional climate, hard constraints and the cast.
Use nothing outside it.

RULES:
1. Write exactly constraints.maxScenes scenes, each close to constraints.avgSceneDuration seconds.
2. The first scene is the hook and follows style.hookType (and climate.hookType when set).
3. The last scene is the closing and follows style.ctaType (and climate.closingType when set).
4. Respect climate.emotionalState, climate.revelationDynamic and climate.narrativePressure throughout.
5. Follow style.scriptInstructions and climate.customInstructions when present.
6. Narration is concise and spoken; visualDescription is detailed enough to generate an image.
7. Characters appear by name and keep their description consistent.
8. Each scene states its narrative goal in one short phrase.

Respond ONLY with valid JSON, no markdown and no explanations:
{
  "title": "catchy title",
  "hook": "narration of the first scene",
  "cta": "narration of the last scene",
  "scenes": [
    {
      "order": 0,
      "narration": "text spoken in this scene",
      "visualDescription": "what appears on screen",
      "duration": 5,
      "goal": "what this scene achieves"
    }
  ]
}"""

    def __init__(self, text_service):
        self.text_service = text_service

    async def run(self, payload: ScriptwriterPayload, model: ModelRef) -> ScriptResult:
        logger.info(
            f"[Script] Requesting {payload.constraints.max_scenes} scenes from {model}"
        )
        response = await self.text_service.complete(self.SYSTEM_PROMPT, payload.to_json(), model)
        document, raw = parse_script(response)

        entries = list(document.scenes)
        # Trust model-supplied order only when every scene carries one
        if all(entry.order is not None for entry in entries):
            entries.sort(key=lambda entry: entry.order)

        default_duration = payload.constraints.avg_scene_duration
        scenes = [
            ParsedScene(
                order=index,
                duration=entry.duration if entry.duration and entry.duration > 0 else default_duration,
                narration=entry.narration,
                visual_desc=entry.visual_description,
                goal=entry.goal,
            )
            for index, entry in enumerate(entries)
        ]

        logger.info(f"[Script] Parsed {len(scenes)} scenes: '{document.title}'")
        return ScriptResult(
            title=document.title,
            hook=document.hook or scenes[0].narration,
            cta=document.cta or scenes[-1].narration,
            scenes=scenes,
            raw=raw,
        )
