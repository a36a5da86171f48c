"""
Prompt Stage
One prompt-engineer call per job, turning scene visual descriptions into
image-generation prompts keyed by scene order.
"""

import json
import logging
from typing import Dict, List, Optional

from shortforge.pipeline.parsing import ScenePrompt, parse_prompts
from shortforge.services.model_registry import ModelRef

logger = logging.getLogger(__name__)

DEFAULT_NEGATIVE_PROMPT = "blurry, low quality, distorted, ugly, bad anatomy, text, watermark"


class PromptStage:
    """Scenes -> {scene order: image prompt}."""

    SYSTEM_PROMPT = """You are a prompt engineer for text-to-image models such as FLUX and Stable Diffusion.

Turn each scene's visual description into an image prompt that:
- produces a striking, high quality vertical (9:16) frame
- keeps characters, palette and style consistent across scenes
- names subject, action, environment, lighting, art style and quality tags, in that order
- is written in English

Always give a negative prompt. Start from "blurry, low quality, distorted, ugly, bad anatomy";
add "extra limbs, missing limbs, disfigured" when people appear and "text, watermark, signature, logo" when needed.

Respond ONLY with valid JSON, no markdown and no explanations:
{
  "prompts": [
    {"sceneOrder": 0, "imagePrompt": "...", "negativePrompt": "..."}
  ],
  "style": "shared style description",
  "consistency": "how consistency is kept"
}"""

    TEMPERATURE = 0.5

    def __init__(self, text_service):
        self.text_service = text_service

    def build_request(
        self,
        scenes: List,
        title: Optional[str] = None,
        visual_style: Optional[str] = None,
        characters: Optional[List[dict]] = None,
    ) -> str:
        document = {
            "title": title or "",
            "visualStyle": visual_style or "",
            "characters": characters or [],
            "scenes": [
                {
                    "order": scene.order,
                    "narration": scene.narration or "",
                    "visualDescription": scene.visual_desc or "",
                    "duration": scene.duration,
                }
                for scene in scenes
            ],
        }
        return (
            "Create one image prompt per scene of this script. "
            "Use each scene's order as sceneOrder.\n\n"
            f"{json.dumps(document, indent=2, ensure_ascii=False)}"
        )

    async def run(
        self,
        scenes: List,
        model: ModelRef,
        title: Optional[str] = None,
        visual_style: Optional[str] = None,
        characters: Optional[List[dict]] = None,
    ) -> Dict[int, ScenePrompt]:
        logger.info(f"[Prompts] Requesting prompts for {len(scenes)} scenes from {model}")
        response = await self.text_service.complete(
            self.SYSTEM_PROMPT,
            self.build_request(scenes, title, visual_style, characters),
            model,
            temperature=self.TEMPERATURE,
        )
        document = parse_prompts(response)

        by_order: Dict[int, ScenePrompt] = {}
        for prompt in document.prompts:
            if prompt.scene_order in by_order:
                logger.warning(f"[Prompts] Duplicate prompt for scene {prompt.scene_order}, keeping first")
                continue
            by_order[prompt.scene_order] = prompt

        missing = {scene.order for scene in scenes} - set(by_order)
        if missing:
            logger.warning(f"[Prompts] No prompt returned for scenes {sorted(missing)}")
        return by_order
